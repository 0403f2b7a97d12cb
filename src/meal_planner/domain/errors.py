"""Error taxonomy for meal plan operations."""

from collections.abc import Mapping


class MealPlanError(Exception):
    """Base error carrying a stable machine-readable code."""

    code = "MEAL_PLAN_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly payload for API responses."""
        payload: dict[str, object] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return f"{self.message} (code: {self.code})"


class InvalidNameError(MealPlanError):
    """Plan or template name is empty or too long."""

    code = "INVALID_NAME"


class DuplicateNameError(MealPlanError):
    """Template name collides with another template in the family."""

    code = "DUPLICATE_NAME"


class NotFoundError(MealPlanError):
    """Requested plan or template does not exist."""

    code = "NOT_FOUND"


class NotATemplateError(MealPlanError):
    """Operation requires a template but got a plan instance."""

    code = "NOT_A_TEMPLATE"


class OutOfRangeError(MealPlanError):
    """Week index outside 0-3."""

    code = "OUT_OF_RANGE"


class MalformedKeyError(MealPlanError):
    """Assignment key cannot be decoded."""

    code = "MALFORMED_KEY"


class InvalidStartDateError(MealPlanError):
    """Start date is more than a year in the past."""

    code = "INVALID_START_DATE"


class MealPlanValidationError(MealPlanError):
    """Structural validation failure (slots, assignments, template fields)."""

    code = "INVALID_MEAL_PLAN"


class MealSlotError(MealPlanError):
    """Meal slot configuration error."""

    code = "MEAL_SLOT_ERROR"
