"""Text-generation oracle port and reply validation."""

import logging
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

_logger = logging.getLogger(__name__)

ReplyT = TypeVar("ReplyT", bound=BaseModel)


class OracleClient(Protocol):
    """Interface for the hosted text-generation service."""

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> object:
        """Return a JSON reply shaped by the given schema."""

    async def generate_text(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
    ) -> str:
        """Return a free-text reply."""


@dataclass(frozen=True)
class DecodeResult(Generic[ReplyT]):
    """Outcome of a structured request: a validated reply or an error."""

    value: ReplyT | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def decode_reply(reply_model: type[ReplyT], raw: object) -> DecodeResult[ReplyT]:
    """Validate a raw reply against the model it was requested with."""
    try:
        return DecodeResult(value=reply_model.model_validate(raw))
    except ValidationError as exc:
        return DecodeResult(error=f"Malformed reply: {exc.error_count()} error(s)")


@dataclass
class OracleService:
    """Sends prompts to the configured oracle client."""

    client: OracleClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def ask_structured(
        self,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        reply_model: type[ReplyT],
    ) -> DecodeResult[ReplyT]:
        """Request a structured reply. Never raises."""
        try:
            raw = await self.client.generate_json(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=schema,
                schema_name=schema_name,
            )
        except Exception as exc:
            _logger.exception("Oracle request %s failed", schema_name)
            return DecodeResult(error=f"{type(exc).__name__}: {exc}")
        result = decode_reply(reply_model, raw)
        if not result.ok:
            _logger.warning("Oracle reply %s rejected: %s", schema_name, result.error)
        return result

    async def ask_text(self, prompt: str) -> str:
        """Request a free-text reply."""
        return await self.client.generate_text(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=prompt,
        )
