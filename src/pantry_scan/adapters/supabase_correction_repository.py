"""Supabase-backed store for expiry corrections."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from pantry_scan.domain.expiry import ResolutionSource, UserCorrection
from pantry_scan.services.corrections import CorrectionRepository


@dataclass
class SupabaseCorrectionRepository(CorrectionRepository):
    """Supabase implementation for the correction history."""

    client: Client

    def list_recent(self, limit: int) -> list[UserCorrection]:
        """Return the most recent corrections, oldest first."""
        response = (
            self.client.table("expiry_corrections")
            .select(
                "item_name, original_date, corrected_date, original_source, recorded_at"
            )
            .order("recorded_at", desc=True)
            .limit(limit)
            .execute()
        )
        rows = response.data or []
        return [_parse_correction(row) for row in reversed(rows)]

    def add_correction(self, correction: UserCorrection) -> None:
        """Insert a correction row."""
        response = (
            self.client.table("expiry_corrections")
            .insert(
                {
                    "item_name": correction.item_name,
                    "original_date": correction.original_date.isoformat(),
                    "corrected_date": correction.corrected_date.isoformat(),
                    "original_source": correction.original_source.value,
                    "recorded_at": correction.recorded_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record expiry correction")


def _parse_correction(row: dict[str, object]) -> UserCorrection:
    return UserCorrection(
        item_name=str(row["item_name"]),
        original_date=date.fromisoformat(str(row["original_date"])),
        corrected_date=date.fromisoformat(str(row["corrected_date"])),
        original_source=ResolutionSource(row["original_source"]),
        recorded_at=datetime.fromisoformat(str(row["recorded_at"])),
    )
