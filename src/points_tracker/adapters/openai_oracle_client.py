"""OpenAI Responses API client for the text-generation oracle."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from points_tracker.services.oracle import OracleClient


@dataclass
class OpenAIOracleClient(OracleClient):
    """Oracle client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIOracleClient":
        """Create an OpenAI oracle client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Call the Responses API with structured outputs."""
        request_payload = _request_payload(model, reasoning_effort, store, prompt)
        request_payload["text"] = {
            "format": {
                "type": "json_schema",
                "name": schema_name,
                "strict": True,
                "schema": schema,
            }
        }
        output_text = await self._create(request_payload)
        return json.loads(output_text)

    async def generate_text(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
    ) -> str:
        """Call the Responses API for a plain text answer."""
        return await self._create(
            _request_payload(model, reasoning_effort, store, prompt)
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()

    async def _create(self, request_payload: dict[str, object]) -> str:
        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text


def _request_payload(
    model: str, reasoning_effort: str | None, store: bool, prompt: str
) -> dict[str, object]:
    payload: dict[str, object] = {
        "model": model,
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}],
            }
        ],
        "store": store,
    }
    if reasoning_effort:
        payload["reasoning"] = {"effort": reasoning_effort}
    return payload
