"""Domain models for 4-week meal plans and templates."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from meal_planner.domain import calendar
from meal_planner.domain.assignment_keys import (
    KEY_SEPARATOR,
    encode_key,
    try_decode_key,
)
from meal_planner.domain.errors import (
    InvalidNameError,
    InvalidStartDateError,
    MealPlanError,
    MealPlanValidationError,
)

MAX_NAME_LENGTH = 50
MAX_MEAL_SLOTS = 8
MAX_START_DATE_AGE_DAYS = 365


def today_utc() -> date:
    """Return the current UTC calendar date."""
    return datetime.now(tz=UTC).date()


def validate_start_date(start_date: date, today: date | None = None) -> None:
    """Reject start dates more than a year in the past."""
    reference = calendar.as_date(today or today_utc())
    oldest = reference - timedelta(days=MAX_START_DATE_AGE_DAYS)
    if calendar.as_date(start_date) < oldest:
        raise InvalidStartDateError(
            "Start date cannot be more than 1 year in the past",
            details={"start_date": calendar.as_date(start_date).isoformat()},
        )


@dataclass(frozen=True)
class MealAssignment:
    """A single recipe assigned to a date and meal slot."""

    meal_plan_id: str
    date: date
    slot_id: str
    recipe_id: str | None = None

    @property
    def assignment_key(self) -> str:
        return encode_key(self.date, self.slot_id)

    @property
    def has_recipe(self) -> bool:
        return self.recipe_id is not None


@dataclass(frozen=True)
class MealPlan:
    """A 4-week meal plan, or a reusable template when is_template is set."""

    id: str
    name: str
    family_id: str
    start_date: date
    meal_slots: tuple[str, ...]
    created_at: datetime
    updated_at: datetime
    created_by: str
    assignments: Mapping[str, str | None] = field(default_factory=dict)
    is_template: bool = False
    template_name: str | None = None
    template_description: str | None = None

    @property
    def end_date(self) -> date:
        return calendar.plan_end_date(self.start_date)

    @property
    def date_range(self) -> str:
        """Display range of the whole plan window."""
        return calendar.format_range(self.start_date, self.end_date)

    def recipe_for_slot(self, day: date, slot_id: str) -> str | None:
        """Return the recipe assigned to a date and slot, if any."""
        return self.assignments.get(encode_key(day, slot_id))

    def contains_recipe(self, recipe_id: str) -> bool:
        """Return True when any slot is assigned the recipe."""
        return recipe_id in self.assignments.values()

    def distinct_recipe_ids(self) -> set[str]:
        """Return every recipe id referenced by the plan."""
        return {
            recipe_id
            for recipe_id in self.assignments.values()
            if recipe_id is not None
        }

    def is_currently_active(self, now: date | datetime | None = None) -> bool:
        """Return True when now falls in the plan window, give or take a day."""
        today = calendar.as_date(now or datetime.now(tz=UTC))
        lenience = timedelta(days=1)
        return self.start_date - lenience <= today <= self.end_date + lenience

    def week_dates(self, week_index: int) -> list[date]:
        return calendar.week_dates(self.start_date, week_index)

    def all_dates(self) -> list[date]:
        return calendar.four_week_dates(self.start_date)

    def assignment_entries(self) -> list[MealAssignment]:
        """Return decodable, non-empty assignments ordered by key."""
        entries: list[MealAssignment] = []
        for key in sorted(self.assignments):
            recipe_id = self.assignments[key]
            decoded = try_decode_key(key)
            if recipe_id is None or decoded is None:
                continue
            day, slot_id = decoded
            entries.append(
                MealAssignment(
                    meal_plan_id=self.id,
                    date=day,
                    slot_id=slot_id,
                    recipe_id=recipe_id,
                )
            )
        return entries

    def validate(
        self, today: date | None = None, *, check_start_date_age: bool = True
    ) -> None:
        """Raise the first validation failure found.

        Pass check_start_date_age=False to keep editing a plan that has aged
        past the start date limit.
        """
        for _, check in self._checks(today, check_start_date_age):
            check()

    def validation_errors(self, today: date | None = None) -> dict[str, str]:
        """Collect every failing field into a field -> message map."""
        errors: dict[str, str] = {}
        for field_name, check in self._checks(today, True):
            try:
                check()
            except MealPlanError as exc:
                errors[field_name] = exc.message
        return errors

    def is_valid(self, today: date | None = None) -> bool:
        return not self.validation_errors(today)

    def to_dict(self) -> dict[str, object]:
        """Serialize into JSON-friendly primitives."""
        return {
            "id": self.id,
            "name": self.name,
            "family_id": self.family_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "meal_slots": list(self.meal_slots),
            "assignments": dict(self.assignments),
            "is_template": self.is_template,
            "template_name": self.template_name,
            "template_description": self.template_description,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "created_by": self.created_by,
        }

    def _checks(
        self, today: date | None, check_start_date_age: bool
    ) -> list[tuple[str, Callable[[], None]]]:
        checks: list[tuple[str, Callable[[], None]]] = [("name", self._validate_name)]
        if check_start_date_age:
            checks.append(("start_date", lambda: self._validate_start_date(today)))
        checks += [
            ("meal_slots", self._validate_meal_slots),
            ("assignments", self._validate_assignments),
        ]
        if self.is_template:
            checks.append(("template", self._validate_template))
        return checks

    def _validate_name(self) -> None:
        if not self.name.strip():
            raise InvalidNameError("Meal plan name cannot be empty")
        if len(self.name) > MAX_NAME_LENGTH:
            raise InvalidNameError(
                f"Meal plan name cannot exceed {MAX_NAME_LENGTH} characters"
            )

    def _validate_start_date(self, today: date | None) -> None:
        # Templates sit on a fixed synthetic reference date.
        if self.is_template:
            return
        validate_start_date(self.start_date, today)

    def _validate_meal_slots(self) -> None:
        if not self.meal_slots:
            raise MealPlanValidationError(
                "At least one meal slot is required", code="INVALID_SLOTS"
            )
        if len(self.meal_slots) > MAX_MEAL_SLOTS:
            raise MealPlanValidationError(
                f"Cannot have more than {MAX_MEAL_SLOTS} meal slots",
                code="INVALID_SLOTS",
            )
        if any(not slot.strip() for slot in self.meal_slots):
            raise MealPlanValidationError(
                "Meal slot names cannot be empty", code="INVALID_SLOTS"
            )

    def _validate_assignments(self) -> None:
        for key in self.assignments:
            if KEY_SEPARATOR not in key or try_decode_key(key) is None:
                raise MealPlanValidationError(
                    f"Invalid assignment key format: {key}",
                    code="INVALID_ASSIGNMENT",
                    details={"key": key},
                )

    def _validate_template(self) -> None:
        if not self.template_name or not self.template_name.strip():
            raise MealPlanValidationError(
                "Template name is required for templates", code="INVALID_TEMPLATE"
            )
