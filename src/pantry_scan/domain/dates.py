"""Models for dates read from product labels."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DateFormat(str, Enum):
    """Label wording that introduced a printed date."""

    BEST_BEFORE = "best-before"
    EXPIRES_ON = "expires-on"
    USE_BY = "use-by"
    SELL_BY = "sell-by"


class ExtractedDate(BaseModel):
    """Candidate calendar date found in label text."""

    model_config = ConfigDict(frozen=True)

    date: date
    confidence: float = Field(ge=0.0, le=1.0)
    format: DateFormat
    raw_text: str = Field(min_length=1)


class DateExtractionResult(BaseModel):
    """Outcome of a label date extraction call."""

    success: bool
    dates: list[ExtractedDate] = Field(default_factory=list)
    processing_time_ms: int = Field(default=0, ge=0)
    error: str | None = None
