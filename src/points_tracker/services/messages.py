"""Single-slot, auto-expiring user-facing messages."""

import asyncio
import logging
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)


@dataclass
class TransientMessageChannel:
    """Holds at most one message and clears it after a fixed delay.

    A newer message replaces the current one and restarts the expiry timer.
    """

    ttl_seconds: float = 5.0
    _message: str | None = field(default=None, init=False)
    _expiry: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)

    @property
    def current(self) -> str | None:
        """Return the active message, if any."""
        return self._message

    def show(self, text: str) -> None:
        """Replace the active message and restart its expiry timer."""
        self._cancel_expiry()
        self._message = text
        _logger.info("User message: %s", text)
        loop = asyncio.get_running_loop()
        self._expiry = loop.call_later(self.ttl_seconds, self._expire)

    def clear(self) -> None:
        """Drop the active message and its timer."""
        self._cancel_expiry()
        self._message = None

    def _expire(self) -> None:
        self._expiry = None
        self._message = None

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None
