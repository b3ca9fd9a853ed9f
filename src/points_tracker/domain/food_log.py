"""Domain models for the food log."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

_UNIT_ALIASES = {
    "g": "gram",
    "grams": "gram",
    "oz": "ounce",
    "lb": "pound",
    "lbs": "pound",
    "tbsp": "tablespoon",
    "tsp": "teaspoon",
}


class FoodUnit(Enum):
    """Units a quantity can be logged in."""

    SERVING = "serving"
    ITEM = "item"
    GRAM = "gram"
    OUNCE = "ounce"
    POUND = "pound"
    CUP = "cup"
    TABLESPOON = "tablespoon"
    TEASPOON = "teaspoon"
    SLICE = "slice"

    @classmethod
    def parse(cls, raw: "str | FoodUnit") -> "FoodUnit":
        """Parse a unit name or one of its short labels."""
        if isinstance(raw, FoodUnit):
            return raw
        cleaned = raw.strip().lower()
        return cls(_UNIT_ALIASES.get(cleaned, cleaned))


class MealType(Enum):
    """Meal categories with their target point ranges."""

    SNACK = "Snack"
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"

    @property
    def target_points(self) -> str:
        return _MEAL_POINT_RANGES[self]

    @classmethod
    def parse(cls, raw: str) -> "MealType":
        """Parse a meal type case-insensitively."""
        cleaned = raw.strip().lower()
        for meal in cls:
            if meal.value.lower() == cleaned:
                return meal
        raise ValueError(f"Unknown meal type: {raw}")


_MEAL_POINT_RANGES = {
    MealType.SNACK: "1-4 points",
    MealType.BREAKFAST: "4-8 points",
    MealType.LUNCH: "8-12 points",
    MealType.DINNER: "10-15 points",
}


@dataclass(frozen=True)
class LogScope:
    """Identifies one user's food log within an application."""

    app_id: str
    user_id: str

    @property
    def path(self) -> str:
        return f"artifacts/{self.app_id}/users/{self.user_id}/foodLog"


@dataclass(frozen=True)
class FoodItem:
    """A committed food log entry."""

    id: UUID
    name: str
    quantity: float
    unit: FoodUnit
    calories: float | None
    protein: float
    carbs: float
    fat: float
    fiber: float
    is_zero_point: bool
    created_at: datetime | None = None


@dataclass
class PendingEntry:
    """Draft entry being filled in before it is committed to the log.

    Nutrient fields hold display text so they can be edited by hand after a
    lookup has filled them in.
    """

    name: str = ""
    quantity: str | float = 1
    unit: FoodUnit = FoodUnit.SERVING
    calories: str = ""
    protein: str = ""
    carbs: str = ""
    fat: str = ""
    fiber: str = ""
    is_zero_point: bool = False
    lookup_succeeded: bool = False

    def reset_nutrients(self) -> None:
        """Drop any looked-up nutrient data."""
        self.calories = ""
        self.protein = ""
        self.carbs = ""
        self.fat = ""
        self.fiber = ""
        self.is_zero_point = False
        self.lookup_succeeded = False
