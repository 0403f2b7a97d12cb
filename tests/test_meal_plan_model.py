"""Tests for the meal plan aggregate."""

from dataclasses import replace
from datetime import date, datetime

import pytest

from meal_planner.domain.errors import (
    InvalidNameError,
    InvalidStartDateError,
    MealPlanValidationError,
    OutOfRangeError,
)
from tests.conftest import make_plan

TODAY = date(2025, 6, 1)


def test_recipe_lookup_and_containment() -> None:
    plan = make_plan(
        assignments={
            "2025-06-02_breakfast": "r1",
            "2025-06-03_dinner": "r2",
            "2025-06-04_lunch": None,
        }
    )

    assert plan.recipe_for_slot(date(2025, 6, 2), "breakfast") == "r1"
    assert plan.recipe_for_slot(date(2025, 6, 4), "lunch") is None
    assert plan.recipe_for_slot(date(2025, 6, 5), "lunch") is None
    assert plan.contains_recipe("r2")
    assert not plan.contains_recipe("r3")
    assert plan.distinct_recipe_ids() == {"r1", "r2"}


def test_end_date_and_range() -> None:
    plan = make_plan(start_date=date(2025, 6, 2))

    assert plan.end_date == date(2025, 6, 29)
    assert plan.date_range == "6/2 - 6/29"
    assert len(plan.all_dates()) == 28


def test_week_dates_delegate_to_calendar() -> None:
    plan = make_plan(start_date=date(2025, 6, 2))

    assert plan.week_dates(3)[0] == date(2025, 6, 23)
    with pytest.raises(OutOfRangeError):
        plan.week_dates(-1)


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (date(2025, 5, 31), False),
        (date(2025, 6, 1), True),
        (date(2025, 6, 2), True),
        (datetime(2025, 6, 29, 23, 0), True),
        (date(2025, 6, 30), True),
        (date(2025, 7, 1), False),
    ],
)
def test_is_currently_active_allows_one_day_slack(now, expected: bool) -> None:
    plan = make_plan(start_date=date(2025, 6, 2))

    assert plan.is_currently_active(now) is expected


def test_assignment_entries_skip_empty_and_malformed() -> None:
    plan = make_plan(
        assignments={
            "2025-06-03_dinner": "r2",
            "2025-06-02_breakfast": "r1",
            "garbage": "r9",
            "2025-06-04_lunch": None,
        }
    )

    entries = plan.assignment_entries()

    assert [(entry.date, entry.slot_id, entry.recipe_id) for entry in entries] == [
        (date(2025, 6, 2), "breakfast", "r1"),
        (date(2025, 6, 3), "dinner", "r2"),
    ]
    assert entries[0].assignment_key == "2025-06-02_breakfast"
    assert entries[0].has_recipe


def test_valid_plan_has_no_errors() -> None:
    plan = make_plan(assignments={"2025-06-02_breakfast": "r1"})

    plan.validate(today=TODAY)
    assert plan.validation_errors(today=TODAY) == {}
    assert plan.is_valid(today=TODAY)


def test_validate_fails_fast_on_first_problem() -> None:
    plan = make_plan(name="  ", meal_slots=())

    with pytest.raises(InvalidNameError) as excinfo:
        plan.validate(today=TODAY)

    assert excinfo.value.code == "INVALID_NAME"


def test_validation_errors_collects_every_field() -> None:
    plan = make_plan(
        name="x" * 51,
        start_date=date(2024, 5, 1),
        meal_slots=tuple(f"slot{i}" for i in range(9)),
        assignments={"nounderscore": "r1"},
    )

    errors = plan.validation_errors(today=TODAY)

    assert set(errors) == {"name", "start_date", "meal_slots", "assignments"}
    assert "50 characters" in errors["name"]
    assert not plan.is_valid(today=TODAY)


def test_start_date_older_than_a_year_is_rejected() -> None:
    plan = make_plan(start_date=date(2024, 5, 31))

    with pytest.raises(InvalidStartDateError) as excinfo:
        plan.validate(today=TODAY)

    assert excinfo.value.code == "INVALID_START_DATE"
    make_plan(start_date=date(2024, 6, 1)).validate(today=TODAY)


def test_blank_slot_names_are_rejected() -> None:
    plan = make_plan(meal_slots=("breakfast", " "))

    with pytest.raises(MealPlanValidationError) as excinfo:
        plan.validate(today=TODAY)

    assert excinfo.value.code == "INVALID_SLOTS"


def test_undecodable_assignment_key_is_a_validation_error() -> None:
    plan = make_plan(assignments={"2025-99-01_lunch": "r1"})

    with pytest.raises(MealPlanValidationError) as excinfo:
        plan.validate(today=TODAY)

    assert excinfo.value.code == "INVALID_ASSIGNMENT"


def test_template_requires_template_name() -> None:
    template = make_plan(is_template=True, template_name=" ")

    errors = template.validation_errors(today=TODAY)

    assert set(errors) == {"template"}
    with pytest.raises(MealPlanValidationError) as excinfo:
        template.validate(today=TODAY)
    assert excinfo.value.code == "INVALID_TEMPLATE"


def test_templates_skip_start_date_age_rule() -> None:
    template = make_plan(
        start_date=date(2024, 1, 1), is_template=True, template_name="Base week"
    )

    assert template.is_valid(today=date(2030, 1, 1))
    assert not replace(template, is_template=False).is_valid(today=date(2030, 1, 1))


def test_to_dict_serializes_dates() -> None:
    plan = make_plan(assignments={"2025-06-02_breakfast": "r1"})

    data = plan.to_dict()

    assert data["start_date"] == "2025-06-02"
    assert data["end_date"] == "2025-06-29"
    assert data["meal_slots"] == ["breakfast", "lunch", "dinner"]
    assert data["assignments"] == {"2025-06-02_breakfast": "r1"}
