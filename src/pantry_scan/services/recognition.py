"""Product recognition from grocery photos."""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel

from pantry_scan.adapters.image_source import ImageSource
from pantry_scan.domain.products import (
    ProductCategory,
    RecognitionResult,
    RecognizedProduct,
)
from pantry_scan.services.vision import VisionClient, elapsed_ms, to_data_url

_logger = logging.getLogger(__name__)

PRODUCT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "products": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                    "category": {
                        "type": "string",
                        "enum": [category.value for category in ProductCategory],
                    },
                    "suggested_expiration_days": {"type": "integer", "minimum": 1},
                    "barcode": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                    "detected_quantity": {
                        "anyOf": [{"type": "integer", "minimum": 1}, {"type": "null"}]
                    },
                    "detected_unit": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                },
                "required": [
                    "name",
                    "confidence",
                    "category",
                    "suggested_expiration_days",
                    "barcode",
                    "detected_quantity",
                    "detected_unit",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["products"],
    "additionalProperties": False,
}

_PROMPT = (
    "Identify each purchased grocery product in the photo. "
    "Return a short product name, a confidence (0-1), one category, "
    "a typical shelf life in days once bought, any readable barcode, "
    "and the visible quantity and unit when you can count them."
)


class ProductRecognizer(Protocol):
    """Interface for recognizing grocery products in a photo."""

    async def recognize(self, image_ref: str) -> RecognitionResult:
        """Return recognized products for an image reference."""


class _ProductExtract(BaseModel):
    products: list[RecognizedProduct]


@dataclass
class VisionProductRecognizer(ProductRecognizer):
    """Product recognizer backed by an LLM vision model."""

    client: VisionClient
    image_source: ImageSource
    model: str
    reasoning_effort: str | None
    store: bool

    async def recognize(self, image_ref: str) -> RecognitionResult:
        """Recognize products, reporting failures in the result."""
        started = time.perf_counter()
        try:
            image_bytes = await self.image_source.load(image_ref)
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=to_data_url(image_bytes),
                schema_name="grocery_products",
                schema=PRODUCT_SCHEMA,
                prompt=_PROMPT,
            )
            extract = _ProductExtract.model_validate(raw)
        except Exception as exc:
            _logger.warning("Product recognition failed: %s", exc)
            return RecognitionResult(
                success=False,
                processing_time_ms=elapsed_ms(started),
                error=str(exc) or type(exc).__name__,
            )
        result = RecognitionResult(
            success=True,
            products=extract.products,
            processing_time_ms=elapsed_ms(started),
        )
        _logger.info(
            "Recognized %s products in %sms",
            len(result.products),
            result.processing_time_ms,
        )
        return result
