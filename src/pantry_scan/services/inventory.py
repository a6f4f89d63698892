"""Service for writing resolved scan items to the inventory."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from pantry_scan.clock import today_utc
from pantry_scan.domain.dates import ExtractedDate
from pantry_scan.domain.expiry import ExpiryResolution, ResolutionSource
from pantry_scan.domain.inventory import AddItemResult, InventoryItem
from pantry_scan.domain.products import RecognizedProduct

_logger = logging.getLogger(__name__)


class InventoryRepository(Protocol):
    """Persistence interface for inventory items."""

    def create_item(self, payload: dict[str, object]) -> InventoryItem:
        """Create an inventory row and return it."""


@dataclass
class InventoryService:
    """Application service for adding scanned items to the inventory."""

    repository: InventoryRepository
    today: Callable[[], date] = today_utc

    def add_item(
        self,
        product: RecognizedProduct,
        dates: Sequence[ExtractedDate],
        image_ref: str | None,
        resolution: ExpiryResolution | None = None,
    ) -> AddItemResult:
        """Store a recognized product with its best known expiration date."""
        expiration_date, source = self._expiration_for(product, dates, resolution)
        requires_user_input = (
            resolution.requires_user_input if resolution is not None else not dates
        )
        payload: dict[str, object] = {
            "name": product.name,
            "category": product.category.value,
            "quantity": product.detected_quantity or 1,
            "unit": product.detected_unit or "piece",
            "expiration_date": expiration_date.isoformat(),
            "confidence": product.confidence,
            "expiry_source": source.value,
            "requires_user_input": requires_user_input,
            "image_ref": image_ref,
            "storage_conditions": (
                resolution.storage_conditions if resolution is not None else None
            ),
        }
        try:
            item = self.repository.create_item(payload)
        except Exception as exc:
            _logger.exception(
                "Failed to add inventory item", extra={"item_name": product.name}
            )
            return AddItemResult(success=False, error=str(exc) or type(exc).__name__)
        return AddItemResult(success=True, item=item)

    def _expiration_for(
        self,
        product: RecognizedProduct,
        dates: Sequence[ExtractedDate],
        resolution: ExpiryResolution | None,
    ) -> tuple[date, ResolutionSource]:
        """Pick the stored date and its source.

        A resolution always decides the source. Without a resolved date the
        recognizer's shelf-life estimate is stored as a placeholder until the
        user confirms it. Label dates are only consulted when no resolution
        was made.
        """
        estimate = self.today() + timedelta(days=product.suggested_expiration_days)
        if resolution is not None:
            return resolution.final_date or estimate, resolution.source
        if dates:
            best = max(dates, key=lambda candidate: candidate.confidence)
            return best.date, ResolutionSource.OCR
        return estimate, ResolutionSource.AI
