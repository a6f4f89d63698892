"""Expiry date extraction from product label photos."""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, Field

from pantry_scan.adapters.image_source import ImageSource
from pantry_scan.domain.dates import DateExtractionResult, ExtractedDate
from pantry_scan.services.label_dates import extract_label_dates
from pantry_scan.services.vision import VisionClient, elapsed_ms, to_data_url

_logger = logging.getLogger(__name__)

LABEL_TEXT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "lines": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                },
                "required": ["text", "confidence"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["lines"],
    "additionalProperties": False,
}

_PROMPT = (
    "Transcribe every printed line on the packaging that contains a date, "
    "exactly as printed (for example 'BEST BEFORE 12/05/2026' or 'USE BY 03.11.26'). "
    "Give each line a confidence (0-1) for how legible it is. "
    "Return an empty list when no dates are visible."
)


class DateExtractor(Protocol):
    """Interface for reading candidate expiry dates from a photo."""

    async def extract(self, image_ref: str) -> DateExtractionResult:
        """Return candidate dates for an image reference."""


class _LabelLine(BaseModel):
    text: str
    confidence: float = Field(ge=0.0, le=1.0)


class _LabelText(BaseModel):
    lines: list[_LabelLine]


@dataclass
class VisionDateExtractor(DateExtractor):
    """Date extractor that transcribes label lines with an LLM and parses them."""

    client: VisionClient
    image_source: ImageSource
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract(self, image_ref: str) -> DateExtractionResult:
        """Extract label dates, reporting failures in the result."""
        started = time.perf_counter()
        try:
            image_bytes = await self.image_source.load(image_ref)
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=to_data_url(image_bytes),
                schema_name="label_dates",
                schema=LABEL_TEXT_SCHEMA,
                prompt=_PROMPT,
            )
            label_text = _LabelText.model_validate(raw)
        except Exception as exc:
            _logger.warning("Label date extraction failed: %s", exc)
            return DateExtractionResult(
                success=False,
                processing_time_ms=elapsed_ms(started),
                error=str(exc) or type(exc).__name__,
            )
        dates: list[ExtractedDate] = []
        for line in label_text.lines:
            dates.extend(extract_label_dates(line.text, line.confidence))
        _logger.info(
            "Extracted %s dates from %s label lines",
            len(dates),
            len(label_text.lines),
        )
        return DateExtractionResult(
            success=True,
            dates=dates,
            processing_time_ms=elapsed_ms(started),
        )
