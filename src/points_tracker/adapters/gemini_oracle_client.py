"""Gemini generateContent client for the text-generation oracle."""

import json
from dataclasses import dataclass

import httpx

from points_tracker.services.oracle import OracleClient

_SCHEMA_TYPES = {
    "object": "OBJECT",
    "array": "ARRAY",
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
}


@dataclass
class HttpxGeminiOracleClient(OracleClient):
    """Oracle client calling the Gemini REST API with httpx.

    Gemini has no reasoning-effort or store options; they are accepted and
    ignored so the client is interchangeable with the OpenAI one.
    """

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxGeminiOracleClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

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
        """Request a JSON reply constrained by a response schema."""
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": _to_gemini_schema(schema),
            },
        }
        return json.loads(await self._generate(model, payload))

    async def generate_text(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
    ) -> str:
        """Request a free-text reply."""
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        return await self._generate(model, payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _generate(self, model: str, payload: dict[str, object]) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        response = await self.http_client.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=30,
        )
        response.raise_for_status()
        text = _candidate_text(response.json())
        if not text:
            raise RuntimeError("Gemini returned no candidate text")
        return text


def _candidate_text(result: dict[str, object]) -> str | None:
    candidates = result.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    if not parts:
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


def _to_gemini_schema(schema: dict[str, object]) -> dict[str, object]:
    """Translate a JSON schema into Gemini's OpenAPI-style subset."""
    converted: dict[str, object] = {}
    schema_type = schema.get("type")
    if isinstance(schema_type, str):
        converted["type"] = _SCHEMA_TYPES.get(schema_type, schema_type.upper())
    properties = schema.get("properties")
    if isinstance(properties, dict):
        converted["properties"] = {
            name: _to_gemini_schema(value) for name, value in properties.items()
        }
    items = schema.get("items")
    if isinstance(items, dict):
        converted["items"] = _to_gemini_schema(items)
    if "required" in schema:
        converted["required"] = schema["required"]
    return converted
