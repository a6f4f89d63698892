"""Product knowledge base entries."""

from dataclasses import dataclass, field

from pantry_scan.domain.products import ProductCategory


@dataclass(frozen=True)
class ProductKnowledge:
    """Shelf-life facts for a known product."""

    name: str
    category: ProductCategory
    baseline_expiration_days: int
    storage_conditions: list[str]
    seasonal_variations: dict[str, int] = field(default_factory=dict)
    brand_variations: dict[str, int] = field(default_factory=dict)
