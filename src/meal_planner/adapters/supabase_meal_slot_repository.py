"""Supabase repository for family meal slots."""

from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.meal_slots import MealSlot
from meal_planner.services.meal_slots import MealSlotRepository


@dataclass
class SupabaseMealSlotRepository(MealSlotRepository):
    """Supabase-backed family meal slot storage."""

    client: Client

    def list_family_slots(self, family_id: str) -> list[MealSlot]:
        """Return stored slots for a family ordered by display order."""
        response = (
            self.client.table("family_meal_slots")
            .select("id, name, slot_order, is_default")
            .eq("family_id", family_id)
            .order("slot_order")
            .execute()
        )
        return [
            MealSlot(
                id=str(row["id"]),
                name=str(row.get("name", "")),
                order=int(row.get("slot_order", 0)),
                is_default=bool(row.get("is_default", False)),
            )
            for row in response.data or []
        ]

    def replace_family_slots(self, family_id: str, slots: list[MealSlot]) -> None:
        """Replace all stored slots for a family."""
        self.client.table("family_meal_slots").delete().eq(
            "family_id", family_id
        ).execute()
        if not slots:
            return
        self.client.table("family_meal_slots").insert(
            [
                {
                    "id": slot.id,
                    "family_id": family_id,
                    "name": slot.name,
                    "slot_order": slot.order,
                    "is_default": slot.is_default,
                }
                for slot in slots
            ]
        ).execute()
