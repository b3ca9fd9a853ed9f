"""Request and response models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DraftUpdate(BaseModel):
    """Partial update of the draft entry."""

    name: str | None = None
    quantity: str | float | None = None
    unit: str | None = None


class SuggestRequest(BaseModel):
    """Meal type to suggest ideas for."""

    meal_type: str


class DraftView(BaseModel):
    name: str
    quantity: str | float
    unit: str
    calories: str
    protein: str
    carbs: str
    fat: str
    fiber: str
    is_zero_point: bool
    lookup_state: str
    lookup_succeeded: bool
    preview_points: int


class LogEntryView(BaseModel):
    id: UUID
    name: str
    quantity: float
    unit: str
    calories: float | None
    protein: float
    carbs: float
    fat: float
    fiber: float
    is_zero_point: bool
    created_at: datetime | None
    points: int


class LogView(BaseModel):
    loaded: bool
    loading: bool
    state: str
    total_points: int
    entries: list[LogEntryView]


class SuggestionView(BaseModel):
    name: str
    description: str


class AdvisoryView(BaseModel):
    is_open: bool
    title: str
    status: str
    body: str
    suggestions: list[SuggestionView]
