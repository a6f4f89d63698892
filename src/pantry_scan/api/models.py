"""Request payloads for the HTTP API."""

from datetime import date

from pydantic import BaseModel, Field

from pantry_scan.domain.dates import ExtractedDate
from pantry_scan.domain.expiry import ResolutionSource
from pantry_scan.domain.products import RecognizedProduct


class ScanRequest(BaseModel):
    """Photo to scan."""

    image_ref: str


class ScanResultPayload(BaseModel):
    """Scan result submitted for validation."""

    success: bool = True
    products: list[RecognizedProduct] = Field(default_factory=list)
    dates: list[ExtractedDate] = Field(default_factory=list)
    processing_time_ms: int = Field(default=0, ge=0)
    error: str | None = None


class ResolveItemPayload(BaseModel):
    """Single item to resolve an expiry date for."""

    item_name: str = Field(min_length=1)
    ocr_dates: list[date] = Field(default_factory=list)
    brand: str | None = None


class BatchResolvePayload(BaseModel):
    """Items to resolve in order."""

    items: list[ResolveItemPayload]


class CorrectionPayload(BaseModel):
    """User fix for a previously resolved expiry date."""

    item_name: str = Field(min_length=1)
    original_date: date
    corrected_date: date
    original_source: ResolutionSource
