"""Domain models for family meal slot configuration."""

from dataclasses import dataclass

from meal_planner.domain.errors import MealSlotError

MAX_SLOT_NAME_LENGTH = 30


@dataclass(frozen=True)
class MealSlot:
    """A named meal of the day (breakfast, lunch, ...) with display order."""

    id: str
    name: str
    order: int
    is_default: bool = False

    def validate(self) -> None:
        """Raise MealSlotError when the slot is not well formed."""
        if not self.name.strip():
            raise MealSlotError("Meal slot name cannot be empty", code="INVALID_NAME")
        if len(self.name) > MAX_SLOT_NAME_LENGTH:
            raise MealSlotError(
                f"Meal slot name cannot exceed {MAX_SLOT_NAME_LENGTH} characters",
                code="INVALID_NAME",
            )
        if self.order < 1:
            raise MealSlotError(
                "Meal slot order must be at least 1", code="INVALID_ORDER"
            )

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except MealSlotError:
            return False
        return True


def default_meal_slots() -> list[MealSlot]:
    """Return the slots every new family starts with."""
    return [
        MealSlot(id="breakfast", name="Breakfast", order=1, is_default=True),
        MealSlot(id="lunch", name="Lunch", order=2, is_default=True),
        MealSlot(id="dinner", name="Dinner", order=3, is_default=True),
        MealSlot(id="snacks", name="Snacks", order=4, is_default=True),
    ]
