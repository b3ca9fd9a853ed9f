"""Points scoring for logged foods."""

import math
import re
from collections.abc import Iterable

from points_tracker.domain.food_log import FoodItem, PendingEntry

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def compute_points(item: FoodItem | PendingEntry) -> int:
    """Return the points value of a logged or draft item.

    Unparseable nutrient values count as zero. Missing (or zero) calories are
    derived from the macros and a missing (or zero) quantity counts as one,
    so a bad quantity never erases points. Rounding happens once, after
    scaling by quantity.
    """
    if item.is_zero_point:
        return 0
    protein = parse_amount(item.protein)
    carbs = parse_amount(item.carbs)
    fat = parse_amount(item.fat)
    fiber = parse_amount(item.fiber)
    calories = parse_amount(item.calories) or (protein * 4 + carbs * 4 + fat * 9)
    quantity = parse_amount(item.quantity) or 1.0

    per_unit = calories / 33 + fat / 9 - min(fiber, carbs / 10) / 5
    return max(0, _round_half_up(per_unit * quantity))


def total_points(items: Iterable[FoodItem | PendingEntry]) -> int:
    """Sum the points of several items."""
    return sum(compute_points(item) for item in items)


def parse_amount(value: object) -> float:
    """Read a non-negative amount from a number or leading numeric text."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        number = float(match.group(1))
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _round_half_up(value: float) -> int:
    # Half-up on the exact remainder, so 0.49999999999999994 rounds to 0.
    whole = math.floor(value)
    return whole + 1 if value - whole >= 0.5 else whole


def format_amount(value: float) -> str:
    """Render an amount as display text, dropping a trailing ``.0``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)
