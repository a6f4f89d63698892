"""Domain models for expiry resolution."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class ResolutionConfidence(str, Enum):
    """Tri-level confidence of a resolved expiry date."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResolutionSource(str, Enum):
    """Cascade step that produced an expiry date."""

    OCR = "ocr"
    AI = "ai"
    MANUAL = "manual"
    NONE = "none"


@dataclass(frozen=True)
class ExpirySuggestion:
    """Knowledge-based expiry estimate before it is wrapped in a resolution."""

    date: date
    confidence: float
    source: ResolutionSource
    reasoning: str
    storage_conditions: list[str]


@dataclass(frozen=True)
class ExpiryResolution:
    """Final expiry decision for one item."""

    item_name: str
    confidence: ResolutionConfidence
    source: ResolutionSource
    requires_user_input: bool
    ocr_result: date | None = None
    ai_suggestion: date | None = None
    final_date: date | None = None
    storage_conditions: list[str] | None = None
    reasoning: str | None = None


@dataclass(frozen=True)
class UserCorrection:
    """A user-supplied fix to a previously resolved expiry date."""

    item_name: str
    original_date: date
    corrected_date: date
    original_source: ResolutionSource
    recorded_at: datetime


@dataclass(frozen=True)
class ResolveRequest:
    """Input for batch resolution."""

    name: str
    ocr_dates: list[date] = field(default_factory=list)
    brand: str | None = None
