"""Supabase-backed inventory repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from pantry_scan.domain.expiry import ResolutionSource
from pantry_scan.domain.inventory import InventoryItem
from pantry_scan.domain.products import ProductCategory
from pantry_scan.services.inventory import InventoryRepository


@dataclass
class SupabaseInventoryRepository(InventoryRepository):
    """Supabase implementation for inventory items."""

    client: Client

    def create_item(self, payload: dict[str, object]) -> InventoryItem:
        """Insert an inventory row and return it."""
        response = self.client.table("inventory_items").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create inventory item")
        return _parse_item(response.data[0])


def _parse_item(row: dict[str, object]) -> InventoryItem:
    return InventoryItem(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        category=ProductCategory(row["category"]),
        quantity=int(row.get("quantity") or 1),
        unit=str(row.get("unit") or "piece"),
        expiration_date=date.fromisoformat(str(row["expiration_date"])),
        added_at=datetime.fromisoformat(str(row["created_at"])),
        confidence=float(row.get("confidence") or 0.0),
        expiry_source=ResolutionSource(row.get("expiry_source") or "none"),
        requires_user_input=bool(row.get("requires_user_input")),
        image_ref=row.get("image_ref"),
        storage_conditions=row.get("storage_conditions"),
    )
