"""Live food log kept in sync with a remote replicated collection."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol
from uuid import UUID

from points_tracker.domain.food_log import FoodItem, LogScope, PendingEntry
from points_tracker.errors import (
    CollaboratorFailure,
    PartialBulkFailure,
    TrackerError,
    ValidationFailure,
)
from points_tracker.services.messages import TransientMessageChannel
from points_tracker.services.points import parse_amount, total_points

_logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


class LogSubscription(Protocol):
    """Handle for a standing snapshot feed."""

    async def close(self) -> None:
        """Stop delivering snapshots."""


class FoodLogRepository(Protocol):
    """Remote collection holding each user's food log."""

    async def subscribe(
        self,
        scope: LogScope,
        on_snapshot: Callable[[list[FoodItem]], None],
        on_error: Callable[[Exception], None],
    ) -> LogSubscription:
        """Open a feed that delivers the full log now and after every change."""

    async def add_entry(self, scope: LogScope, payload: dict[str, object]) -> FoodItem:
        """Insert an entry; the store assigns its id and creation time."""

    async def delete_entry(self, scope: LogScope, entry_id: UUID) -> None:
        """Delete an entry by id. Deleting a missing entry is not an error."""

    async def list_entry_ids(self, scope: LogScope) -> list[UUID]:
        """Return the ids of every entry in the log."""


class SubscriptionState(Enum):
    """Lifecycle of the snapshot feed."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    ERROR = "error"


@dataclass
class FoodLogStore:
    """Materialized view of a user's food log.

    The view is replaced wholesale by every snapshot and is never patched
    locally: writes go to the remote collection and show up once the feed
    echoes them back.
    """

    repository: FoodLogRepository
    messages: TransientMessageChannel
    state: SubscriptionState = field(default=SubscriptionState.IDLE, init=False)
    loaded: bool = field(default=False, init=False)
    loading: bool = field(default=False, init=False)
    scope: LogScope | None = field(default=None, init=False)
    _items: list[FoodItem] = field(default_factory=list, init=False)
    _subscription: LogSubscription | None = field(default=None, init=False)
    _epoch: int = field(default=0, init=False)

    @property
    def entries(self) -> list[FoodItem]:
        """Return entries, most recent first."""
        return sorted(
            self._items, key=lambda item: item.created_at or _OLDEST, reverse=True
        )

    @property
    def total_points(self) -> int:
        return total_points(self._items)

    async def subscribe(self, app_id: str, user_id: str) -> None:
        """Start mirroring the remote log for a user."""
        await self.unsubscribe()
        scope = LogScope(app_id=app_id, user_id=user_id)
        self.scope = scope
        self.loading = True
        epoch = self._epoch

        def on_snapshot(items: list[FoodItem]) -> None:
            if epoch != self._epoch:
                _logger.debug("Dropping snapshot for released subscription")
                return
            if self.state is SubscriptionState.ERROR:
                _logger.info("Food log feed recovered for %s", scope.path)
            self.state = SubscriptionState.SUBSCRIBED
            self._items = list(items)
            self.loaded = True
            self.loading = False

        def on_error(exc: Exception) -> None:
            if epoch != self._epoch:
                return
            self._feed_failed(exc)

        # The feed may deliver the first snapshot before subscribe() returns.
        self.state = SubscriptionState.SUBSCRIBED
        try:
            subscription = await self.repository.subscribe(scope, on_snapshot, on_error)
        except Exception as exc:
            self._feed_failed(exc)
            return
        if epoch != self._epoch:
            await _close_quietly(subscription)
            return
        self._subscription = subscription
        _logger.info("Subscribed to food log %s", scope.path)

    async def unsubscribe(self) -> None:
        """Release the feed. Safe to call when nothing is subscribed."""
        self._epoch += 1
        subscription = self._subscription
        self._subscription = None
        self.scope = None
        self.state = SubscriptionState.IDLE
        self._items = []
        self.loaded = False
        self.loading = False
        if subscription is not None:
            await _close_quietly(subscription)
            _logger.info("Unsubscribed from food log")

    async def add(self, entry: PendingEntry) -> FoodItem | None:
        """Commit a looked-up draft entry to the remote log."""
        try:
            if not entry.lookup_succeeded:
                raise ValidationFailure("Please look up a food item first.")
            scope = self._require_scope()
            payload = _entry_payload(entry)
        except ValidationFailure as exc:
            self._report(exc)
            return None
        try:
            item = await self.repository.add_entry(scope, payload)
        except Exception as exc:
            self._report(CollaboratorFailure("Failed to save food item."), cause=exc)
            return None
        _logger.info("Logged %s (%s)", item.name, item.id)
        return item

    async def remove(self, entry_id: UUID) -> bool:
        """Delete one entry from the remote log."""
        try:
            scope = self._require_scope()
        except ValidationFailure as exc:
            self._report(exc)
            return False
        try:
            await self.repository.delete_entry(scope, entry_id)
        except Exception as exc:
            self._report(CollaboratorFailure("Failed to delete food item."), cause=exc)
            return False
        return True

    async def clear(self) -> bool:
        """Delete every entry, attempting each one even if others fail."""
        try:
            scope = self._require_scope()
        except ValidationFailure as exc:
            self._report(exc)
            return False
        try:
            entry_ids = await self.repository.list_entry_ids(scope)
        except Exception as exc:
            self._report(CollaboratorFailure("Failed to clear entire log."), cause=exc)
            return False
        results = await asyncio.gather(
            *(self.repository.delete_entry(scope, entry_id) for entry_id in entry_ids),
            return_exceptions=True,
        )
        failed: list[UUID] = []
        for entry_id, result in zip(entry_ids, results, strict=True):
            if isinstance(result, Exception):
                _logger.error("Failed to delete food log entry %s: %s", entry_id, result)
                failed.append(entry_id)
        if failed:
            self._report(PartialBulkFailure("Failed to clear entire log.", failed))
            return False
        return True

    def _require_scope(self) -> LogScope:
        if self.scope is None:
            raise ValidationFailure("Database not connected.")
        return self.scope

    def _feed_failed(self, exc: Exception) -> None:
        self.state = SubscriptionState.ERROR
        self.loading = False
        self._report(
            CollaboratorFailure("Failed to load food log. Please check your connection."),
            cause=exc,
        )

    def _report(self, failure: TrackerError, cause: Exception | None = None) -> None:
        if isinstance(failure, ValidationFailure):
            _logger.info("Rejected: %s", failure.user_message)
        else:
            _logger.error("%s", failure.user_message, exc_info=cause)
        self.messages.show(failure.user_message)


def _entry_payload(entry: PendingEntry) -> dict[str, object]:
    name = entry.name.strip()
    if not name:
        raise ValidationFailure("Please enter a food name.")
    quantity = parse_amount(entry.quantity)
    if quantity <= 0:
        raise ValidationFailure("Quantity must be greater than zero.")
    calories = parse_amount(entry.calories) or None
    return {
        "name": name,
        "quantity": quantity,
        "unit": entry.unit.value,
        "calories": calories,
        "protein": parse_amount(entry.protein),
        "carbs": parse_amount(entry.carbs),
        "fat": parse_amount(entry.fat),
        "fiber": parse_amount(entry.fiber),
        "is_zero_point": entry.is_zero_point,
    }


async def _close_quietly(subscription: LogSubscription) -> None:
    try:
        await subscription.close()
    except Exception:
        _logger.exception("Failed to close food log subscription")
