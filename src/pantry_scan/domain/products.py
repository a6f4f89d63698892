"""Models for product recognition results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProductCategory(str, Enum):
    """Grocery categories reported by the product recognizer."""

    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    DAIRY = "dairy"
    MEAT = "meat"
    PANTRY = "pantry"
    BEVERAGES = "beverages"
    SNACKS = "snacks"
    FROZEN = "frozen"
    OTHER = "other"


class RecognizedProduct(BaseModel):
    """Single grocery product identified in a photo."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    category: ProductCategory
    suggested_expiration_days: int = Field(ge=1)
    barcode: str | None = None
    detected_quantity: int | None = Field(default=None, ge=1)
    detected_unit: str | None = None


class RecognitionResult(BaseModel):
    """Outcome of a product recognition call."""

    success: bool
    products: list[RecognizedProduct] = Field(default_factory=list)
    processing_time_ms: int = Field(default=0, ge=0)
    error: str | None = None
