"""Family meal slot configuration service."""

from dataclasses import dataclass, replace
from typing import Protocol

from meal_planner.domain.errors import MealSlotError
from meal_planner.domain.meal_slots import MealSlot, default_meal_slots


class MealSlotRepository(Protocol):
    """Persistence interface for per-family meal slots."""

    def list_family_slots(self, family_id: str) -> list[MealSlot]:
        """Return stored slots for a family, empty when none are configured."""

    def replace_family_slots(self, family_id: str, slots: list[MealSlot]) -> None:
        """Replace all stored slots for a family."""


@dataclass
class MealSlotService:
    """Application service for configuring which meals a family plans."""

    repository: MealSlotRepository

    @staticmethod
    def default_slots() -> list[MealSlot]:
        return default_meal_slots()

    def get_family_slots(self, family_id: str) -> list[MealSlot]:
        """Return the family's slots, falling back to the defaults."""
        slots = self.repository.list_family_slots(family_id)
        if not slots:
            return self.default_slots()
        return sorted(slots, key=lambda slot: slot.order)

    def get_slot(self, family_id: str, slot_id: str) -> MealSlot | None:
        return next(
            (slot for slot in self.get_family_slots(family_id) if slot.id == slot_id),
            None,
        )

    def update_family_slots(self, family_id: str, slots: list[MealSlot]) -> None:
        """Validate and store a complete slot configuration."""
        for slot in slots:
            slot.validate()
        names = [slot.name.lower() for slot in slots]
        if len(names) != len(set(names)):
            raise MealSlotError(
                "Duplicate meal slot names are not allowed",
                code="DUPLICATE_SLOT_NAMES",
            )
        orders = [slot.order for slot in slots]
        if len(orders) != len(set(orders)):
            raise MealSlotError(
                "Duplicate meal slot orders are not allowed",
                code="DUPLICATE_SLOT_ORDERS",
            )
        self.repository.replace_family_slots(family_id, list(slots))

    def add_slot(self, family_id: str, new_slot: MealSlot) -> list[MealSlot]:
        """Add a slot, keeping names and orders unique."""
        existing = self.get_family_slots(family_id)
        _ensure_unique(existing, new_slot)
        updated = sorted([*existing, new_slot], key=lambda slot: slot.order)
        self.update_family_slots(family_id, updated)
        return updated

    def remove_slot(self, family_id: str, slot_id: str) -> list[MealSlot]:
        """Remove a slot; the last remaining slot cannot be removed."""
        existing = self.get_family_slots(family_id)
        if not any(slot.id == slot_id for slot in existing):
            raise MealSlotError(
                f'Meal slot with ID "{slot_id}" not found', code="SLOT_NOT_FOUND"
            )
        if len(existing) <= 1:
            raise MealSlotError(
                "Cannot remove the last meal slot. At least one slot is required.",
                code="CANNOT_REMOVE_LAST_SLOT",
            )
        updated = [slot for slot in existing if slot.id != slot_id]
        self.update_family_slots(family_id, updated)
        return updated

    def update_slot(
        self, family_id: str, slot_id: str, updated_slot: MealSlot
    ) -> list[MealSlot]:
        """Replace one slot, preserving its id."""
        existing = self.get_family_slots(family_id)
        index = next(
            (i for i, slot in enumerate(existing) if slot.id == slot_id), None
        )
        if index is None:
            raise MealSlotError(
                f'Meal slot with ID "{slot_id}" not found', code="SLOT_NOT_FOUND"
            )
        updated_slot.validate()
        others = [slot for slot in existing if slot.id != slot_id]
        _ensure_unique(others, updated_slot)

        updated = list(existing)
        updated[index] = replace(updated_slot, id=slot_id)
        updated.sort(key=lambda slot: slot.order)
        self.update_family_slots(family_id, updated)
        return updated

    def reset_to_defaults(self, family_id: str) -> list[MealSlot]:
        slots = self.default_slots()
        self.update_family_slots(family_id, slots)
        return slots

    def next_available_order(self, family_id: str) -> int:
        slots = self.get_family_slots(family_id)
        return max((slot.order for slot in slots), default=0) + 1

    def reorder_slots(self, family_id: str, slot_ids: list[str]) -> list[MealSlot]:
        """Renumber slots 1..n following the given id order."""
        existing = self.get_family_slots(family_id)
        if len(slot_ids) != len(existing):
            raise MealSlotError(
                "All slot IDs must be provided for reordering",
                code="INVALID_REORDER_LIST",
            )
        by_id = {slot.id: slot for slot in existing}
        if set(slot_ids) != set(by_id):
            raise MealSlotError(
                "Invalid slot IDs provided for reordering", code="INVALID_SLOT_IDS"
            )
        reordered = [
            replace(by_id[slot_id], order=position)
            for position, slot_id in enumerate(slot_ids, start=1)
        ]
        self.update_family_slots(family_id, reordered)
        return reordered


def _ensure_unique(existing: list[MealSlot], candidate: MealSlot) -> None:
    if candidate.name.lower() in {slot.name.lower() for slot in existing}:
        raise MealSlotError(
            f'A meal slot with the name "{candidate.name}" already exists',
            code="SLOT_NAME_EXISTS",
        )
    if candidate.order in {slot.order for slot in existing}:
        raise MealSlotError(
            f"A meal slot with order {candidate.order} already exists",
            code="SLOT_ORDER_EXISTS",
        )
