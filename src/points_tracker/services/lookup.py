"""Nutrient lookup workflow for the draft entry."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from points_tracker.domain.food_log import FoodItem, FoodUnit, PendingEntry
from points_tracker.domain.oracle import NutrientEstimate
from points_tracker.services.food_log import FoodLogStore
from points_tracker.services.messages import TransientMessageChannel
from points_tracker.services.oracle import OracleService
from points_tracker.services.points import compute_points, format_amount

_logger = logging.getLogger(__name__)

NUTRIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fat": {"type": "number"},
        "fiber": {"type": "number"},
        "is_zero_point": {"type": "boolean"},
    },
    "required": ["calories", "protein", "carbs", "fat", "fiber", "is_zero_point"],
    "additionalProperties": False,
}


class LookupState(Enum):
    """Progress of the nutrient lookup for the current food name."""

    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class NutrientLookupService:
    """Stages a draft entry and fills it from the oracle before commit.

    Every name change starts a new epoch; a reply is only applied when it
    belongs to the epoch still in effect when it arrives.
    """

    oracle: OracleService
    store: FoodLogStore
    messages: TransientMessageChannel
    draft: PendingEntry = field(default_factory=PendingEntry)
    state: LookupState = LookupState.IDLE
    _epoch: int = field(default=0, init=False)

    def set_name(self, name: str) -> None:
        """Change the food name, discarding any previous lookup."""
        if name == self.draft.name:
            return
        self.draft.name = name
        self._reset()

    def set_quantity(self, quantity: str | float) -> None:
        self.draft.quantity = quantity

    def set_unit(self, unit: str | FoodUnit) -> None:
        self.draft.unit = FoodUnit.parse(unit)

    def preview_points(self) -> int:
        """Return the points the draft would score if committed now."""
        return compute_points(self.draft)

    async def lookup(self) -> bool:
        """Ask the oracle for nutrient facts of one unit of the draft food."""
        name = self.draft.name.strip()
        if not name:
            self.messages.show("Please enter a food name.")
            return False
        self._reset()
        self.state = LookupState.FETCHING
        epoch = self._epoch
        unit = self.draft.unit
        prompt = (
            "Based on general Weight Watchers principles, provide the nutritional "
            f"information for one single '{unit.value}' of '{name}'. "
            "Include calories. Determine if it's a zero-point food. "
            "Respond ONLY with a JSON object."
        )
        result = await self.oracle.ask_structured(
            prompt, NUTRIENT_SCHEMA, "nutrient_estimate", NutrientEstimate
        )
        if epoch != self._epoch:
            _logger.info("Discarding stale lookup for %r", name)
            return False
        if result.value is None:
            self.state = LookupState.FAILURE
            self.messages.show("Could not find nutritional data.")
            return False
        _apply_estimate(self.draft, result.value)
        self.state = LookupState.SUCCESS
        return True

    async def commit(self) -> FoodItem | None:
        """Write the draft to the log and start a fresh draft.

        The draft is left alone if its name was edited while the write was in
        flight.
        """
        epoch = self._epoch
        item = await self.store.add(self.draft)
        if item is None or epoch != self._epoch:
            return item
        self.draft = PendingEntry()
        self._reset()
        return item

    def _reset(self) -> None:
        self._epoch += 1
        self.draft.reset_nutrients()
        self.state = LookupState.IDLE


def _apply_estimate(draft: PendingEntry, estimate: NutrientEstimate) -> None:
    draft.calories = format_amount(estimate.calories)
    draft.protein = format_amount(estimate.protein)
    draft.carbs = format_amount(estimate.carbs)
    draft.fat = format_amount(estimate.fat)
    draft.fiber = format_amount(estimate.fiber)
    draft.is_zero_point = estimate.is_zero_point
    draft.lookup_succeeded = True

