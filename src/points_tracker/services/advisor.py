"""Meal suggestions and day analysis from the oracle."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from points_tracker.domain.food_log import MealType
from points_tracker.domain.oracle import MealSuggestion, MealSuggestions
from points_tracker.services.food_log import FoodLogStore
from points_tracker.services.messages import TransientMessageChannel
from points_tracker.services.oracle import OracleService
from points_tracker.services.points import compute_points, format_amount

_logger = logging.getLogger(__name__)

SUGGESTIONS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["name", "description"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["suggestions"],
    "additionalProperties": False,
}


class PanelStatus(Enum):
    """Display state of the advisory panel."""

    WORKING = "working"
    READY = "ready"
    ERROR = "error"


@dataclass
class AdvisoryPanel:
    """What the advisory surface currently shows."""

    title: str = ""
    status: PanelStatus = PanelStatus.READY
    body: str = ""
    suggestions: list[MealSuggestion] = field(default_factory=list)
    is_open: bool = False


@dataclass
class AdvisorService:
    """Read-only advice flows over the current food log."""

    oracle: OracleService
    store: FoodLogStore
    messages: TransientMessageChannel
    panel: AdvisoryPanel = field(default_factory=AdvisoryPanel)
    _epoch: int = field(default=0, init=False)

    @property
    def is_generating(self) -> bool:
        return self.panel.is_open and self.panel.status is PanelStatus.WORKING

    async def suggest_meal(self, meal_type: str | None) -> AdvisoryPanel | None:
        """Suggest three meals within the target range of a meal type."""
        if not meal_type or not meal_type.strip():
            return None
        try:
            meal = MealType.parse(meal_type)
        except ValueError:
            self.messages.show(f"Unknown meal type: {meal_type.strip()}.")
            return None
        epoch = self._open(
            f"Suggesting a {meal.value}...", "Thinking of some tasty ideas..."
        )
        prompt = (
            "I'm on a Weight Watchers-style points system. Suggest 3 diverse and "
            f"simple {meal.value.lower()} ideas that are in the "
            f"{meal.target_points} range. For each suggestion, provide a name and "
            "a brief, appealing description. Respond ONLY with a JSON object "
            'containing an array called "suggestions".'
        )
        result = await self.oracle.ask_structured(
            prompt, SUGGESTIONS_SCHEMA, "meal_suggestions", MealSuggestions
        )
        if epoch != self._epoch:
            return None
        if result.value is None:
            self._fail("Could not generate suggestions.")
        else:
            self.panel = AdvisoryPanel(
                title=f"{meal.value} Suggestions",
                status=PanelStatus.READY,
                suggestions=list(result.value.suggestions),
                is_open=True,
            )
        return self.panel

    async def analyze_day(self) -> AdvisoryPanel | None:
        """Ask for encouragement and one suggestion based on today's log."""
        entries = self.store.entries
        if not entries:
            self.messages.show("Log at least one food item to get an analysis.")
            return None
        epoch = self._open("Analyzing Your Day...", "Reviewing your log...")
        summary = ", ".join(
            f"{format_amount(item.quantity)} {item.unit.value} of {item.name} "
            f"({compute_points(item)} points)"
            for item in entries
        )
        prompt = (
            "I am on a Weight Watchers-style points system. My total points today "
            f"are {self.store.total_points}. My food log contains: {summary}. "
            "Provide a brief, encouraging analysis of my day's eating. Comment on "
            "the balance of my meals and my total points. Offer one positive, "
            "actionable suggestion for tomorrow. Keep the tone friendly. Respond "
            "with simple text, using markdown for formatting."
        )
        try:
            text = await self.oracle.ask_text(prompt)
        except Exception:
            _logger.exception("Day analysis failed")
            text = ""
        if epoch != self._epoch:
            return None
        if not text.strip():
            self._fail("Could not generate analysis.")
        else:
            self.panel = AdvisoryPanel(
                title="Your Daily Analysis",
                status=PanelStatus.READY,
                body=text.replace("\n", "<br />"),
                is_open=True,
            )
        return self.panel

    def close_panel(self) -> None:
        """Close the panel; a reply still in flight is dropped."""
        self._epoch += 1
        self.panel = AdvisoryPanel()

    def _open(self, title: str, body: str) -> int:
        self._epoch += 1
        self.panel = AdvisoryPanel(
            title=title, status=PanelStatus.WORKING, body=body, is_open=True
        )
        return self._epoch

    def _fail(self, message: str) -> None:
        self.panel = AdvisoryPanel(
            title="Error", status=PanelStatus.ERROR, body=message, is_open=True
        )

