"""OpenAI Responses API client for criteria extraction."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from menu_recommender.domain.errors import ExternalServiceError
from menu_recommender.services.criteria import LanguageClient


@dataclass
class OpenAICriteriaClient(LanguageClient):
    """Language client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAICriteriaClient":
        """Create an OpenAI criteria client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def parse(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "food_criteria",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise ExternalServiceError("OpenAI returned an empty response")
        try:
            payload = json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise ExternalServiceError("OpenAI returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ExternalServiceError("OpenAI returned a non-object payload")
        return payload

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        await self.client.close()
