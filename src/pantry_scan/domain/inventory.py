"""Domain models for inventory records."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from pantry_scan.domain.expiry import ResolutionSource
from pantry_scan.domain.products import ProductCategory


@dataclass(frozen=True)
class InventoryItem:
    """Represents a stored grocery item."""

    id: UUID
    name: str
    category: ProductCategory
    quantity: int
    unit: str
    expiration_date: date
    added_at: datetime
    confidence: float
    expiry_source: ResolutionSource
    requires_user_input: bool
    image_ref: str | None = None
    storage_conditions: list[str] | None = None

    def days_until_expiry(self, today: date) -> int:
        """Return whole days left, never negative."""
        return max(0, (self.expiration_date - today).days)

    def is_expired(self, today: date) -> bool:
        """Return true once the expiration date has passed."""
        return self.expiration_date < today


@dataclass(frozen=True)
class AddItemResult:
    """Outcome of writing an item to the inventory."""

    success: bool
    item: InventoryItem | None = None
    error: str | None = None
