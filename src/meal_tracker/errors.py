"""Application error types."""


class MealTrackerError(Exception):
    """Base class for errors surfaced to API callers."""


class InvalidInputError(MealTrackerError):
    """Raised when user input is rejected before any external call."""


class MealNotFoundError(MealTrackerError):
    """Raised when a meal id does not exist for the user."""

    def __init__(self, meal_id: str) -> None:
        super().__init__(f"Meal {meal_id} not found")
        self.meal_id = meal_id


class StorageError(MealTrackerError):
    """Raised when a document store operation fails."""
