"""Domain models for scan orchestration."""

from dataclasses import dataclass, field
from enum import Enum

from pantry_scan.domain.dates import ExtractedDate
from pantry_scan.domain.expiry import ExpiryResolution
from pantry_scan.domain.inventory import InventoryItem
from pantry_scan.domain.products import RecognizedProduct


@dataclass(frozen=True)
class ScanResult:
    """Joined output of the product recognizer and the date extractor."""

    success: bool
    products: list[RecognizedProduct]
    dates: list[ExtractedDate]
    processing_time_ms: int
    error: str | None = None
    cancelled: bool = False


class ScanStage(str, Enum):
    """Stages reported while a scan is processed."""

    INITIALIZING = "initializing"
    RECOGNIZING = "recognizing"
    EXTRACTING_DATES = "extracting-dates"
    SAVING = "saving"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ScanProgress:
    """Advisory progress event for UI feedback."""

    stage: ScanStage
    percent_complete: int
    message: str


@dataclass(frozen=True)
class ProcessedScan:
    """Result of a staged scan that also resolved and stored items."""

    scan_result: ScanResult
    resolved_items: list[InventoryItem]
    total_processing_time_ms: int
    resolutions: list[ExpiryResolution] = field(default_factory=list)
    failed_items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScanValidation:
    """Quality report for a scan result."""

    is_valid: bool
    issues: list[str]
