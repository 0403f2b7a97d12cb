"""Pydantic request and response models for the meal plan API."""

from datetime import date

from pydantic import BaseModel, Field


class CreatePlanRequest(BaseModel):
    """Payload for creating a meal plan."""

    name: str
    family_id: str
    start_date: date
    meal_slots: list[str]
    created_by: str
    assignments: dict[str, str | None] = Field(default_factory=dict)


class AssignRecipeRequest(BaseModel):
    """Payload for assigning a recipe to a date and slot."""

    day: date
    slot_id: str
    recipe_id: str


class SaveTemplateRequest(BaseModel):
    """Payload for saving a plan as a template."""

    template_name: str
    description: str | None = None


class ApplyTemplateRequest(BaseModel):
    """Payload for applying a template at a new start date."""

    start_date: date


class WeekAssignment(BaseModel):
    """One cell of the weekly calendar view."""

    day: date
    slot_id: str
    recipe_id: str | None


class WeekView(BaseModel):
    """A single week of a plan with its assignments."""

    week_index: int
    label: str
    dates: list[date]
    assignments: list[WeekAssignment]
