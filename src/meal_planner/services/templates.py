"""Template engine: save plans as reusable templates and apply them.

Templates are date-agnostic. Their assignments are re-anchored onto a fixed
reference start date, so a template saved today and one saved next year line
up day for day. Applying a template shifts every assignment by the same day
offset onto the caller's start date.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta

from meal_planner.domain import calendar
from meal_planner.domain.assignment_keys import encode_key, try_decode_key
from meal_planner.domain.errors import (
    DuplicateNameError,
    InvalidNameError,
    NotATemplateError,
    NotFoundError,
)
from meal_planner.domain.meal_plans import (
    MAX_NAME_LENGTH,
    MealPlan,
    validate_start_date,
)
from meal_planner.services.meal_plans import MealPlanService

_logger = logging.getLogger(__name__)

# A Monday, so template weeks keep their weekday alignment.
TEMPLATE_REFERENCE_DATE = date(2024, 1, 1)
APPLIED_PLAN_PREFIX = "Meal Plan from "


@dataclass(frozen=True)
class TemplateStats:
    """Completion summary of a template."""

    total_slots: int
    assigned_slots: int
    empty_slots: int
    unique_recipes: int
    completion_percentage: int
    meal_slots_count: int


@dataclass
class TemplateService:
    """Service for creating, applying and inspecting meal plan templates."""

    plan_service: MealPlanService
    reference_date: date = TEMPLATE_REFERENCE_DATE

    def save_as_template(
        self,
        source_plan_id: str,
        template_name: str,
        description: str | None = None,
    ) -> MealPlan:
        """Copy a plan into a new template anchored at the reference date."""
        source = self._load(source_plan_id, "Meal plan not found")
        name = _clean_template_name(template_name)
        if not self.is_template_name_available(name, source.family_id):
            raise DuplicateNameError(
                "A template with this name already exists",
                details={"template_name": name, "family_id": source.family_id},
            )

        assignments = _shift_assignments(
            source.assignments,
            source_start=source.start_date,
            target_start=self.reference_date,
            window_only=True,
        )
        template = self.plan_service.new_plan(
            name=name,
            family_id=source.family_id,
            start_date=self.reference_date,
            meal_slots=source.meal_slots,
            created_by=source.created_by,
            assignments=assignments,
            is_template=True,
            template_name=name,
            template_description=_clean_description(description),
        )
        saved = self.plan_service.save_new(template)
        _logger.info(
            "Template saved: id=%s source=%s assignments=%s",
            saved.id,
            source.id,
            len(assignments),
        )
        return saved

    def apply_template(self, template_id: str, new_start_date: date) -> MealPlan:
        """Create a new meal plan from a template starting at new_start_date."""
        template = self._load(template_id, "Template not found")
        if not template.is_template:
            raise NotATemplateError(
                "The specified meal plan is not a template",
                details={"plan_id": template_id},
            )
        new_start_date = calendar.as_date(new_start_date)
        validate_start_date(new_start_date, today=self.plan_service.clock().date())

        assignments = _shift_assignments(
            template.assignments,
            source_start=template.start_date,
            target_start=new_start_date,
            window_only=False,
        )
        plan = self.plan_service.new_plan(
            name=_applied_plan_name(template.template_name or ""),
            family_id=template.family_id,
            start_date=new_start_date,
            meal_slots=template.meal_slots,
            created_by=template.created_by,
            assignments=assignments,
        )
        saved = self.plan_service.save_new(plan)
        _logger.info(
            "Template applied: template=%s plan=%s start=%s",
            template.id,
            saved.id,
            new_start_date.isoformat(),
        )
        return saved

    def get_template_stats(self, template: MealPlan) -> TemplateStats:
        """Return slot usage statistics for a template."""
        if not template.is_template:
            raise NotATemplateError(
                "The specified meal plan is not a template",
                details={"plan_id": template.id},
            )
        slots_count = len(template.meal_slots)
        total = slots_count * calendar.DAYS_IN_PLAN
        assigned = sum(
            1 for recipe_id in template.assignments.values() if recipe_id is not None
        )
        return TemplateStats(
            total_slots=total,
            assigned_slots=assigned,
            empty_slots=total - assigned,
            unique_recipes=len(template.distinct_recipe_ids()),
            completion_percentage=_percent(assigned, total),
            meal_slots_count=slots_count,
        )

    def is_template_name_available(self, name: str, family_id: str) -> bool:
        """Return True when no template in the family uses the name."""
        wanted = name.strip().lower()
        return not any(
            (template.template_name or "").strip().lower() == wanted
            for template in self.list_templates(family_id)
        )

    def list_templates(self, family_id: str) -> list[MealPlan]:
        """Return the family's templates."""
        return [
            plan
            for plan in self.plan_service.repository.list_templates(family_id)
            if plan.is_template
        ]

    def delete_template(self, template_id: str) -> None:
        """Delete a template, refusing to delete ordinary plans."""
        template = self._load(template_id, "Template not found")
        if not template.is_template:
            raise NotATemplateError(
                "The specified meal plan is not a template",
                details={"plan_id": template_id},
            )
        self.plan_service.delete_plan(template_id)

    def _load(self, plan_id: str, message: str) -> MealPlan:
        plan = self.plan_service.get_plan(plan_id)
        if plan is None:
            raise NotFoundError(message, details={"plan_id": plan_id})
        return plan


def _shift_assignments(
    assignments: Mapping[str, str | None],
    *,
    source_start: date,
    target_start: date,
    window_only: bool,
) -> dict[str, str | None]:
    shifted: dict[str, str | None] = {}
    for key, recipe_id in assignments.items():
        decoded = try_decode_key(key)
        if recipe_id is None or decoded is None:
            _logger.debug("Skipping assignment key=%s", key)
            continue
        day, slot_id = decoded
        offset = calendar.day_offset(source_start, day)
        if window_only and not 0 <= offset < calendar.DAYS_IN_PLAN:
            _logger.debug("Skipping assignment outside plan window key=%s", key)
            continue
        new_key = encode_key(target_start + timedelta(days=offset), slot_id)
        shifted[new_key] = recipe_id
    return shifted


def _clean_template_name(template_name: str) -> str:
    name = (template_name or "").strip()
    if not name:
        raise InvalidNameError("Template name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"Template name cannot exceed {MAX_NAME_LENGTH} characters"
        )
    return name


def _clean_description(description: str | None) -> str | None:
    if description is None or not description.strip():
        return None
    return description.strip()


def _percent(part: int, total: int) -> int:
    """Return part/total as a whole percentage, rounding halves up."""
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)


def _applied_plan_name(template_name: str) -> str:
    """Name a plan after its template, shortened to fit MAX_NAME_LENGTH."""
    room = MAX_NAME_LENGTH - len(APPLIED_PLAN_PREFIX)
    return APPLIED_PLAN_PREFIX + template_name.strip()[:room].rstrip()
