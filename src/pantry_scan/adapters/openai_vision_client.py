"""OpenAI Responses API client for grocery photo analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from pantry_scan.services.vision import VisionClient


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    image_detail: str = "high"

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Send the photo and prompt, returning the parsed JSON payload."""
        request: dict[str, object] = {
            "model": model,
            "input": [self._photo_message(prompt, image_data_url)],
            "text": {"format": _json_schema_format(schema_name, schema)},
            "store": store,
        }
        if reasoning_effort:
            request["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request)
        if not response.output_text:
            raise RuntimeError(f"OpenAI returned an empty {schema_name} response")
        payload = json.loads(response.output_text)
        if not isinstance(payload, dict):
            raise RuntimeError(f"OpenAI returned a non-object {schema_name} response")
        return payload

    def _photo_message(self, prompt: str, image_data_url: str) -> dict[str, object]:
        return {
            "role": "user",
            "content": [
                {"type": "input_text", "text": prompt},
                {
                    "type": "input_image",
                    "image_url": image_data_url,
                    "detail": self.image_detail,
                },
            ],
        }


def _json_schema_format(
    schema_name: str, schema: dict[str, object]
) -> dict[str, object]:
    return {
        "type": "json_schema",
        "name": schema_name,
        "strict": True,
        "schema": schema,
    }
