"""Supabase repository for meal plans, templates and their assignments."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from meal_planner.domain.assignment_keys import encode_key, try_decode_key
from meal_planner.domain.errors import NotFoundError
from meal_planner.domain.meal_plans import MealPlan
from meal_planner.services.meal_plans import MealPlanRepository

_logger = logging.getLogger(__name__)

PLANS_TABLE = "meal_plans"
ASSIGNMENTS_TABLE = "meal_assignments"


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase-backed gateway for meal plans.

    Each plan is one row in ``meal_plans``; its non-empty assignments are rows
    in ``meal_assignments``. Template name uniqueness is also backed by a
    unique index on ``(family_id, lower(template_name))`` for templates.
    """

    client: Client

    def get_plan(self, plan_id: str) -> MealPlan | None:
        """Return a plan by id, if present."""
        response = (
            self.client.table(PLANS_TABLE)
            .select("*")
            .eq("id", plan_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        assignments = self._load_assignments([plan_id])
        return _parse_plan(response.data[0], assignments.get(plan_id, {}))

    def save_plan(self, plan: MealPlan) -> MealPlan:
        """Upsert the plan row and replace its assignment rows."""
        previous = self.get_plan(plan.id)
        response = self.client.table(PLANS_TABLE).upsert(_plan_row(plan)).execute()
        if not response.data:
            raise RuntimeError("Failed to save meal plan")
        try:
            self._replace_assignments(plan)
        except Exception:
            if previous is None:
                self.client.table(PLANS_TABLE).delete().eq("id", plan.id).execute()
            else:
                _logger.warning("Restoring meal plan after failed save id=%s", plan.id)
                self.client.table(PLANS_TABLE).upsert(_plan_row(previous)).execute()
                self._replace_assignments(previous)
            raise
        return plan

    def list_plans(self, family_id: str | None = None) -> list[MealPlan]:
        """Return plans, optionally restricted to one family."""
        query = self.client.table(PLANS_TABLE).select("*")
        if family_id is not None:
            query = query.eq("family_id", family_id)
        response = query.order("start_date", desc=True).execute()
        return self._parse_rows(response.data or [])

    def list_templates(self, family_id: str) -> list[MealPlan]:
        """Return the family's templates."""
        response = (
            self.client.table(PLANS_TABLE)
            .select("*")
            .eq("family_id", family_id)
            .eq("is_template", True)
            .execute()
        )
        return self._parse_rows(response.data or [])

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan and its assignments."""
        self.client.table(ASSIGNMENTS_TABLE).delete().eq(
            "meal_plan_id", plan_id
        ).execute()
        response = self.client.table(PLANS_TABLE).delete().eq("id", plan_id).execute()
        if not response.data:
            raise NotFoundError("Meal plan not found", details={"plan_id": plan_id})

    def _replace_assignments(self, plan: MealPlan) -> None:
        self.client.table(ASSIGNMENTS_TABLE).delete().eq(
            "meal_plan_id", plan.id
        ).execute()
        rows = _assignment_rows(plan)
        if rows:
            self.client.table(ASSIGNMENTS_TABLE).insert(rows).execute()

    def _parse_rows(self, rows: list[dict[str, object]]) -> list[MealPlan]:
        if not rows:
            return []
        plan_ids = [str(row["id"]) for row in rows]
        assignments = self._load_assignments(plan_ids)
        return [
            _parse_plan(row, assignments.get(str(row["id"]), {})) for row in rows
        ]

    def _load_assignments(
        self, plan_ids: list[str]
    ) -> dict[str, dict[str, str | None]]:
        response = (
            self.client.table(ASSIGNMENTS_TABLE)
            .select("meal_plan_id, assignment_date, slot_id, recipe_id")
            .in_("meal_plan_id", plan_ids)
            .execute()
        )
        grouped: dict[str, dict[str, str | None]] = {}
        for row in response.data or []:
            key = encode_key(
                date.fromisoformat(str(row["assignment_date"])), str(row["slot_id"])
            )
            grouped.setdefault(str(row["meal_plan_id"]), {})[key] = row.get(
                "recipe_id"
            )
        return grouped


def _plan_row(plan: MealPlan) -> dict[str, object]:
    return {
        "id": plan.id,
        "name": plan.name,
        "family_id": plan.family_id,
        "start_date": plan.start_date.isoformat(),
        "meal_slots": list(plan.meal_slots),
        "is_template": plan.is_template,
        "template_name": plan.template_name,
        "template_description": plan.template_description,
        "created_at": plan.created_at.isoformat(),
        "updated_at": plan.updated_at.isoformat(),
        "created_by": plan.created_by,
    }


def _assignment_rows(plan: MealPlan) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for key, recipe_id in plan.assignments.items():
        decoded = try_decode_key(key)
        if recipe_id is None or decoded is None:
            if decoded is None:
                _logger.debug("Not storing malformed assignment key=%s", key)
            continue
        day, slot_id = decoded
        rows.append(
            {
                "meal_plan_id": plan.id,
                "assignment_date": day.isoformat(),
                "slot_id": slot_id,
                "recipe_id": recipe_id,
            }
        )
    return rows


def _parse_plan(
    row: Mapping[str, object], assignments: dict[str, str | None]
) -> MealPlan:
    """Parse a meal_plans row into a domain model."""
    return MealPlan(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        family_id=str(row.get("family_id", "")),
        start_date=date.fromisoformat(str(row["start_date"])[:10]),
        meal_slots=tuple(str(slot) for slot in row.get("meal_slots") or []),
        assignments=assignments,
        is_template=bool(row.get("is_template", False)),
        template_name=row.get("template_name"),
        template_description=row.get("template_description"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
        created_by=str(row.get("created_by", "")),
    )
