"""Meal plan and template API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_planner.api.schemas import (
    ApplyTemplateRequest,
    AssignRecipeRequest,
    CreatePlanRequest,
    SaveTemplateRequest,
    WeekAssignment,
    WeekView,
)
from meal_planner.domain import calendar

if TYPE_CHECKING:
    from meal_planner.containers import AppContainer

router = APIRouter(tags=["meal-plans"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/plans", dependencies=[Depends(require_token)])
async def list_plans(request: Request, family_id: str | None = None) -> dict:
    """Return meal plans, optionally for one family."""
    plans = _container(request).meal_plan_service.list_plans(family_id)
    return {"plans": [plan.to_dict() for plan in plans]}


@router.post(
    "/plans",
    dependencies=[Depends(require_token)],
    status_code=status.HTTP_201_CREATED,
)
async def create_plan(payload: CreatePlanRequest, request: Request) -> dict:
    """Create a new meal plan."""
    plan = _container(request).meal_plan_service.create_plan(
        name=payload.name,
        family_id=payload.family_id,
        start_date=payload.start_date,
        meal_slots=payload.meal_slots,
        created_by=payload.created_by,
        assignments=payload.assignments,
    )
    return plan.to_dict()


@router.get("/plans/{plan_id}", dependencies=[Depends(require_token)])
async def get_plan(plan_id: str, request: Request) -> dict:
    """Return a single meal plan."""
    plan = _container(request).meal_plan_service.require_plan(plan_id)
    return plan.to_dict()


@router.delete(
    "/plans/{plan_id}",
    dependencies=[Depends(require_token)],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_plan(plan_id: str, request: Request) -> None:
    """Delete a meal plan."""
    _container(request).meal_plan_service.delete_plan(plan_id)


@router.put("/plans/{plan_id}/assignments", dependencies=[Depends(require_token)])
async def assign_recipe(
    plan_id: str, payload: AssignRecipeRequest, request: Request
) -> dict:
    """Assign a recipe to one date and slot."""
    plan = _container(request).meal_plan_service.assign_recipe(
        plan_id, payload.day, payload.slot_id, payload.recipe_id
    )
    return plan.to_dict()


@router.delete(
    "/plans/{plan_id}/assignments", dependencies=[Depends(require_token)]
)
async def clear_slot(plan_id: str, day: date, slot_id: str, request: Request) -> dict:
    """Clear the recipe assigned to one date and slot."""
    plan = _container(request).meal_plan_service.clear_slot(plan_id, day, slot_id)
    return plan.to_dict()


@router.get(
    "/plans/{plan_id}/weeks/{week_index}", dependencies=[Depends(require_token)]
)
async def plan_week(plan_id: str, week_index: int, request: Request) -> WeekView:
    """Return one week of a plan as calendar cells."""
    plan = _container(request).meal_plan_service.require_plan(plan_id)
    dates = plan.week_dates(week_index)
    return WeekView(
        week_index=week_index,
        label=calendar.format_week_range(plan.start_date, week_index),
        dates=dates,
        assignments=[
            WeekAssignment(
                day=day, slot_id=slot_id, recipe_id=plan.recipe_for_slot(day, slot_id)
            )
            for day in dates
            for slot_id in plan.meal_slots
        ],
    )


@router.post(
    "/plans/{plan_id}/template",
    dependencies=[Depends(require_token)],
    status_code=status.HTTP_201_CREATED,
)
async def save_as_template(
    plan_id: str, payload: SaveTemplateRequest, request: Request
) -> dict:
    """Save a plan as a reusable template."""
    template = _container(request).template_service.save_as_template(
        plan_id, payload.template_name, payload.description
    )
    return template.to_dict()


@router.get("/templates", dependencies=[Depends(require_token)])
async def list_templates(family_id: str, request: Request) -> dict:
    """Return a family's templates."""
    templates = _container(request).template_service.list_templates(family_id)
    return {"templates": [template.to_dict() for template in templates]}


@router.get("/templates/name-available", dependencies=[Depends(require_token)])
async def template_name_available(
    family_id: str, name: str, request: Request
) -> dict[str, bool]:
    """Check whether a template name is free within a family."""
    service = _container(request).template_service
    return {"available": service.is_template_name_available(name, family_id)}


@router.post(
    "/templates/{template_id}/apply",
    dependencies=[Depends(require_token)],
    status_code=status.HTTP_201_CREATED,
)
async def apply_template(
    template_id: str, payload: ApplyTemplateRequest, request: Request
) -> dict:
    """Create a meal plan from a template."""
    plan = _container(request).template_service.apply_template(
        template_id, payload.start_date
    )
    return plan.to_dict()


@router.get("/templates/{template_id}/stats", dependencies=[Depends(require_token)])
async def template_stats(template_id: str, request: Request) -> dict[str, int]:
    """Return completion statistics for a template."""
    container = _container(request)
    template = container.meal_plan_service.require_plan(template_id)
    return asdict(container.template_service.get_template_stats(template))


@router.delete(
    "/templates/{template_id}",
    dependencies=[Depends(require_token)],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_template(template_id: str, request: Request) -> None:
    """Delete a template."""
    _container(request).template_service.delete_template(template_id)
