"""Supabase-backed food log with a realtime snapshot feed."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from supabase import AsyncClient

from points_tracker.domain.food_log import FoodItem, FoodUnit, LogScope
from points_tracker.services.food_log import FoodLogRepository, LogSubscription

_COLUMNS = (
    "id, name, quantity, unit, calories, protein, carbs, fat, fiber, "
    "is_zero_point, created_at"
)
_FAILED_STATUSES = {"CHANNEL_ERROR", "TIMED_OUT"}

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation of the food log collection."""

    client: AsyncClient
    table: str = "food_log"
    schema: str = "public"

    async def subscribe(
        self,
        scope: LogScope,
        on_snapshot: Callable[[list[FoodItem]], None],
        on_error: Callable[[Exception], None],
    ) -> LogSubscription:
        """Listen for row changes and re-read the whole log on each one."""
        subscription = SupabaseLogSubscription(
            repository=self,
            scope=scope,
            on_snapshot=on_snapshot,
            on_error=on_error,
        )
        channel = self.client.channel(scope.path.replace("/", ":"))
        channel.on_postgres_changes(
            "*",
            schema=self.schema,
            table=self.table,
            filter=f"user_id=eq.{scope.user_id}",
            callback=subscription.on_change,
        )
        await channel.subscribe(subscription.on_status)
        subscription.channel = channel
        await subscription.refresh()
        return subscription

    async def list_entries(self, scope: LogScope) -> list[FoodItem]:
        """Return every entry in the log."""
        response = await (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("app_id", scope.app_id)
            .eq("user_id", scope.user_id)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    async def add_entry(self, scope: LogScope, payload: dict[str, object]) -> FoodItem:
        """Insert an entry row and return it with its assigned id."""
        response = await (
            self.client.table(self.table)
            .insert({"app_id": scope.app_id, "user_id": scope.user_id, **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food log entry")
        return _parse_item(response.data[0])

    async def delete_entry(self, scope: LogScope, entry_id: UUID) -> None:
        """Delete an entry row; a missing row is not an error."""
        await (
            self.client.table(self.table)
            .delete()
            .eq("id", str(entry_id))
            .eq("app_id", scope.app_id)
            .eq("user_id", scope.user_id)
            .execute()
        )

    async def list_entry_ids(self, scope: LogScope) -> list[UUID]:
        """Return ids of every entry in the log."""
        response = await (
            self.client.table(self.table)
            .select("id")
            .eq("app_id", scope.app_id)
            .eq("user_id", scope.user_id)
            .execute()
        )
        return [UUID(row["id"]) for row in response.data or []]


@dataclass
class SupabaseLogSubscription(LogSubscription):
    """Realtime channel that re-reads the log after every change.

    Refreshes run one at a time so snapshots reach the listener in the order
    they were read.
    """

    repository: SupabaseFoodLogRepository
    scope: LogScope
    on_snapshot: Callable[[list[FoodItem]], None]
    on_error: Callable[[Exception], None]
    channel: object | None = None
    closed: bool = False
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, repr=False)

    async def refresh(self) -> None:
        """Read the full log and hand it to the listener."""
        async with self._lock:
            if self.closed:
                return
            try:
                items = await self.repository.list_entries(self.scope)
            except Exception as exc:
                if not self.closed:
                    self.on_error(exc)
                return
            if not self.closed:
                self.on_snapshot(items)

    def on_change(self, payload: dict[str, object]) -> None:
        """Realtime callback for inserts, updates and deletes."""
        if self.closed:
            return
        change = payload.get("data", payload)
        if not isinstance(change, dict) or not _touches_app(change, self.scope.app_id):
            return
        event = change.get("type") or change.get("eventType")
        _logger.debug("Food log change: %s", event)
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def on_status(self, status: str, error: Exception | None = None) -> None:
        """Realtime callback for channel status changes."""
        if self.closed or status not in _FAILED_STATUSES:
            return
        self.on_error(error or RuntimeError(f"Realtime channel status: {status}"))

    async def close(self) -> None:
        """Leave the realtime channel and stop pending refreshes."""
        if self.closed:
            return
        self.closed = True
        for task in list(self._tasks):
            task.cancel()
        if self.channel is not None:
            await self.repository.client.remove_channel(self.channel)


def _parse_item(row: dict[str, object]) -> FoodItem:
    calories = row.get("calories")
    created_at = row.get("created_at")
    return FoodItem(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        quantity=float(row.get("quantity") or 1.0),
        unit=FoodUnit.parse(str(row.get("unit") or "serving")),
        calories=float(calories) if calories is not None else None,
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        fiber=float(row.get("fiber") or 0.0),
        is_zero_point=bool(row.get("is_zero_point", False)),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def _touches_app(change: dict[str, object], app_id: str) -> bool:
    """Return False only when the changed row is known to belong to another app.

    The channel filter can only match on ``user_id``. Deleted rows usually carry
    just their primary key, so a change without ``app_id`` still counts.
    """
    app_ids: set[object] = set()
    for key in ("record", "old_record", "new", "old"):
        row = change.get(key)
        if isinstance(row, dict) and row.get("app_id") is not None:
            app_ids.add(row["app_id"])
    return not app_ids or app_id in app_ids
