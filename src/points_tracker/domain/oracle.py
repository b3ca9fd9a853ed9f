"""Models for structured oracle replies."""

from pydantic import BaseModel, ConfigDict, Field


class NutrientEstimate(BaseModel):
    """Nutrient facts for exactly one unit of a food."""

    model_config = ConfigDict(strict=True)

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float = Field(ge=0.0)
    is_zero_point: bool


class MealSuggestion(BaseModel):
    """Single meal idea."""

    model_config = ConfigDict(strict=True)

    name: str
    description: str


class MealSuggestions(BaseModel):
    """Structured output for meal suggestions."""

    model_config = ConfigDict(strict=True)

    suggestions: list[MealSuggestion] = Field(min_length=1)
