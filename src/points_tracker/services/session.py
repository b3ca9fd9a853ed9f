"""Tracker session tying identity, the food log and the workflows together."""

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol

from points_tracker.services.advisor import AdvisorService
from points_tracker.services.food_log import FoodLogStore
from points_tracker.services.lookup import NutrientLookupService
from points_tracker.services.messages import TransientMessageChannel

_logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Supplies the signed-in user's identifier."""

    async def resolve_user_id(self) -> str | None:
        """Return a stable user id once a session exists."""


@dataclass
class TrackerSession:
    """One user's session.

    The food log subscription is opened by ``start`` and released by
    ``close``; use the session as an async context manager so the release
    happens on every exit path.
    """

    app_id: str
    identity: IdentityProvider
    store: FoodLogStore
    lookup: NutrientLookupService
    advisor: AdvisorService
    messages: TransientMessageChannel
    user_id: str | None = None

    async def start(self) -> bool:
        """Resolve the user and subscribe to their log."""
        try:
            user_id = await self.identity.resolve_user_id()
        except Exception:
            _logger.exception("Authentication failed")
            user_id = None
        if not user_id:
            self.messages.show("Could not connect to the database. Please refresh.")
            return False
        self.user_id = user_id
        await self.store.subscribe(self.app_id, user_id)
        return True

    async def close(self) -> None:
        """Release the log subscription and pending messages."""
        await self.store.unsubscribe()
        self.advisor.close_panel()
        self.messages.clear()
        self.user_id = None

    async def __aenter__(self) -> "TrackerSession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
