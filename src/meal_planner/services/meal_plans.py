"""Meal plan lifecycle and assignment operations."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import uuid4

from meal_planner.domain.assignment_keys import encode_key
from meal_planner.domain.errors import NotFoundError
from meal_planner.domain.meal_plans import MealAssignment, MealPlan

_logger = logging.getLogger(__name__)


class MealPlanRepository(Protocol):
    """Persistence gateway for meal plans and templates."""

    def get_plan(self, plan_id: str) -> MealPlan | None:
        """Return a plan by id, if present."""

    def save_plan(self, plan: MealPlan) -> MealPlan:
        """Insert or replace a plan with its assignments and return it."""

    def list_plans(self, family_id: str | None = None) -> list[MealPlan]:
        """Return plans, optionally restricted to one family."""

    def list_templates(self, family_id: str) -> list[MealPlan]:
        """Return the family's templates."""

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan, raising NotFoundError when it does not exist."""


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def new_plan_id() -> str:
    return str(uuid4())


@dataclass
class MealPlanService:
    """Application service for meal plan CRUD and slot assignments."""

    repository: MealPlanRepository
    clock: Callable[[], datetime] = field(default=utc_now)
    id_factory: Callable[[], str] = field(default=new_plan_id)

    def new_plan(  # noqa: PLR0913
        self,
        *,
        name: str,
        family_id: str,
        start_date: date,
        meal_slots: list[str] | tuple[str, ...],
        created_by: str,
        assignments: dict[str, str | None] | None = None,
        is_template: bool = False,
        template_name: str | None = None,
        template_description: str | None = None,
    ) -> MealPlan:
        """Build an unsaved plan with a fresh id and timestamps."""
        now = self.clock()
        return MealPlan(
            id=self.id_factory(),
            name=name,
            family_id=family_id,
            start_date=start_date,
            meal_slots=tuple(meal_slots),
            assignments=dict(assignments or {}),
            is_template=is_template,
            template_name=template_name,
            template_description=template_description,
            created_at=now,
            updated_at=now,
            created_by=created_by,
        )

    def create_plan(  # noqa: PLR0913
        self,
        *,
        name: str,
        family_id: str,
        start_date: date,
        meal_slots: list[str] | tuple[str, ...],
        created_by: str,
        assignments: dict[str, str | None] | None = None,
    ) -> MealPlan:
        """Validate and persist a new meal plan."""
        plan = self.new_plan(
            name=name,
            family_id=family_id,
            start_date=start_date,
            meal_slots=meal_slots,
            created_by=created_by,
            assignments=assignments,
        )
        return self.save_new(plan)

    def save_new(self, plan: MealPlan) -> MealPlan:
        """Validate and persist a plan built by new_plan."""
        plan.validate(today=self.clock().date())
        saved = self.repository.save_plan(plan)
        _logger.info(
            "Meal plan saved: id=%s family=%s template=%s",
            saved.id,
            saved.family_id,
            saved.is_template,
        )
        return saved

    def update_plan(self, plan: MealPlan) -> MealPlan:
        """Validate and persist changes to an existing plan."""
        stored = self.require_plan(plan.id)
        updated = replace(plan, updated_at=self.clock())
        updated.validate(
            today=self.clock().date(),
            check_start_date_age=updated.start_date != stored.start_date,
        )
        return self.repository.save_plan(updated)

    def get_plan(self, plan_id: str) -> MealPlan | None:
        """Return a plan by id, if present."""
        return self.repository.get_plan(plan_id)

    def require_plan(self, plan_id: str) -> MealPlan:
        """Return a plan by id or raise NotFoundError."""
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("Meal plan not found", details={"plan_id": plan_id})
        return plan

    def list_plans(self, family_id: str | None = None) -> list[MealPlan]:
        """Return plans, optionally for a single family."""
        return self.repository.list_plans(family_id)

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan by id."""
        self.repository.delete_plan(plan_id)
        _logger.info("Meal plan deleted: id=%s", plan_id)

    def assign_recipe(
        self, plan_id: str, day: date, slot_id: str, recipe_id: str
    ) -> MealPlan:
        """Assign a recipe to one date and slot of a plan."""
        plan = self.require_plan(plan_id)
        assignments = dict(plan.assignments)
        assignments[encode_key(day, slot_id)] = recipe_id
        return self.update_plan(replace(plan, assignments=assignments))

    def clear_slot(self, plan_id: str, day: date, slot_id: str) -> MealPlan:
        """Remove whatever recipe is assigned to one date and slot."""
        plan = self.require_plan(plan_id)
        assignments = dict(plan.assignments)
        assignments.pop(encode_key(day, slot_id), None)
        return self.update_plan(replace(plan, assignments=assignments))

    def get_assignments(self, plan_id: str) -> list[MealAssignment]:
        """Return structured assignments for a plan, or [] when it is missing."""
        plan = self.repository.get_plan(plan_id)
        if plan is None:
            return []
        return plan.assignment_entries()

    def plans_containing_recipe(self, recipe_id: str) -> list[MealPlan]:
        """Return every plan that uses the recipe."""
        return [
            plan
            for plan in self.repository.list_plans()
            if plan.contains_recipe(recipe_id)
        ]

    def active_plans_containing_recipe(
        self, recipe_id: str, now: datetime | None = None
    ) -> list[MealPlan]:
        """Return currently active plans that use the recipe."""
        reference = now or self.clock()
        return [
            plan
            for plan in self.plans_containing_recipe(recipe_id)
            if plan.is_currently_active(reference)
        ]

    def remove_recipe_from_all_plans(self, recipe_id: str) -> int:
        """Unassign a recipe everywhere and return the number of plans touched."""
        affected = self.plans_containing_recipe(recipe_id)
        for plan in affected:
            assignments = {
                key: value
                for key, value in plan.assignments.items()
                if value != recipe_id
            }
            self.repository.save_plan(
                replace(plan, assignments=assignments, updated_at=self.clock())
            )
        if affected:
            _logger.info(
                "Recipe removed from meal plans: recipe=%s plans=%s",
                recipe_id,
                len(affected),
            )
        return len(affected)
