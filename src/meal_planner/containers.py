"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from meal_planner.adapters.supabase_meal_slot_repository import (
    SupabaseMealSlotRepository,
)
from meal_planner.config import Settings
from meal_planner.services.meal_plans import MealPlanService
from meal_planner.services.meal_slots import MealSlotService
from meal_planner.services.templates import TemplateService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_plan_service: MealPlanService
    template_service: TemplateService
    meal_slot_service: MealSlotService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_plan_service = MealPlanService(SupabaseMealPlanRepository(supabase_client))
    template_service = TemplateService(meal_plan_service)
    meal_slot_service = MealSlotService(SupabaseMealSlotRepository(supabase_client))

    # Lifespan teardown hook; the Supabase client holds nothing to close.
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        meal_plan_service=meal_plan_service,
        template_service=template_service,
        meal_slot_service=meal_slot_service,
        close_resources=close_resources,
    )
