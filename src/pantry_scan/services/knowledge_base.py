"""Static shelf-life knowledge for common groceries."""

from dataclasses import dataclass, field
from datetime import date

from pantry_scan.domain.knowledge import ProductKnowledge
from pantry_scan.domain.products import ProductCategory

_PRODUCTS: dict[str, ProductKnowledge] = {
    "carrot": ProductKnowledge(
        name="Carrot",
        category=ProductCategory.VEGETABLES,
        baseline_expiration_days=21,
        storage_conditions=["refrigerated", "dark_place", "high_humidity"],
        seasonal_variations={"summer": 14, "winter": 28},
    ),
    "apple": ProductKnowledge(
        name="Apple",
        category=ProductCategory.FRUITS,
        baseline_expiration_days=14,
        storage_conditions=["refrigerated", "crisper_drawer"],
        seasonal_variations={"fall": 21, "spring": 10},
    ),
    "banana": ProductKnowledge(
        name="Banana",
        category=ProductCategory.FRUITS,
        baseline_expiration_days=7,
        storage_conditions=["room_temperature", "away_from_other_fruits"],
        seasonal_variations={"summer": 5, "winter": 10},
    ),
    "milk": ProductKnowledge(
        name="Milk",
        category=ProductCategory.DAIRY,
        baseline_expiration_days=7,
        storage_conditions=["refrigerated", "back_of_fridge"],
        brand_variations={"organic": 5, "ultra_pasteurized": 14},
    ),
    "cheese": ProductKnowledge(
        name="Cheese",
        category=ProductCategory.DAIRY,
        baseline_expiration_days=14,
        storage_conditions=["refrigerated", "cheese_drawer"],
        brand_variations={"aged": 30, "fresh": 7},
    ),
    "chicken": ProductKnowledge(
        name="Chicken Breast",
        category=ProductCategory.MEAT,
        baseline_expiration_days=3,
        storage_conditions=["refrigerated", "meat_drawer"],
        brand_variations={"organic": 2, "frozen": 180},
    ),
    "bread": ProductKnowledge(
        name="Bread",
        category=ProductCategory.PANTRY,
        baseline_expiration_days=7,
        storage_conditions=["room_temperature", "bread_box"],
        brand_variations={"whole_grain": 5, "artisan": 3},
    ),
    "tomato": ProductKnowledge(
        name="Tomato",
        category=ProductCategory.VEGETABLES,
        baseline_expiration_days=7,
        storage_conditions=["room_temperature", "stem_side_down"],
        seasonal_variations={"summer": 5, "winter": 10},
    ),
    "lettuce": ProductKnowledge(
        name="Lettuce",
        category=ProductCategory.VEGETABLES,
        baseline_expiration_days=5,
        storage_conditions=["refrigerated", "crisper_drawer", "paper_towel"],
        seasonal_variations={"summer": 3, "winter": 7},
    ),
    "yogurt": ProductKnowledge(
        name="Yogurt",
        category=ProductCategory.DAIRY,
        baseline_expiration_days=10,
        storage_conditions=["refrigerated", "back_of_fridge"],
        brand_variations={"greek": 14, "probiotic": 7},
    ),
}

# Order matters: the first category whose keywords match wins.
_CATEGORY_KEYWORDS: dict[ProductCategory, tuple[str, ...]] = {
    ProductCategory.FRUITS: (
        "apple",
        "banana",
        "orange",
        "grape",
        "strawberry",
        "blueberry",
    ),
    ProductCategory.VEGETABLES: (
        "carrot",
        "tomato",
        "lettuce",
        "onion",
        "potato",
        "broccoli",
    ),
    ProductCategory.DAIRY: ("milk", "cheese", "yogurt", "cream", "butter"),
    ProductCategory.MEAT: ("chicken", "beef", "pork", "lamb", "turkey"),
    ProductCategory.PANTRY: ("bread", "pasta", "rice", "flour", "sugar", "oil"),
}

# Coarse classifier used when an item is missing from the knowledge base.
_FALLBACK_KEYWORDS: tuple[tuple[ProductCategory, tuple[str, ...], int], ...] = (
    (ProductCategory.DAIRY, ("milk", "cheese", "yogurt"), 7),
    (ProductCategory.MEAT, ("chicken", "beef", "pork"), 3),
    (ProductCategory.FRUITS, ("apple", "banana", "orange"), 14),
    (ProductCategory.VEGETABLES, ("carrot", "tomato", "lettuce"), 7),
    (ProductCategory.PANTRY, ("bread", "pasta", "rice"), 7),
)
_FALLBACK_DEFAULT_DAYS = 7

_CATEGORY_STORAGE: dict[ProductCategory, list[str]] = {
    ProductCategory.FRUITS: ["refrigerated", "crisper_drawer"],
    ProductCategory.VEGETABLES: ["refrigerated", "crisper_drawer"],
    ProductCategory.DAIRY: ["refrigerated", "back_of_fridge"],
    ProductCategory.MEAT: ["refrigerated", "meat_drawer"],
    ProductCategory.PANTRY: ["room_temperature", "dark_place"],
    ProductCategory.FROZEN: ["frozen", "deep_freeze"],
}
DEFAULT_STORAGE = ["room_temperature"]


@dataclass(frozen=True)
class CategoryGuess:
    """Coarse category and shelf life for an unknown item."""

    category: ProductCategory
    expiration_days: int


@dataclass
class ProductKnowledgeBase:
    """Read-only lookup of per-product shelf-life facts."""

    products: dict[str, ProductKnowledge] = field(
        default_factory=lambda: dict(_PRODUCTS)
    )

    def lookup(self, item_name: str) -> ProductKnowledge | None:
        """Return the entry for an item name, if known."""
        return self.products.get(normalize_item_name(item_name))

    def classify(self, item_name: str) -> CategoryGuess:
        """Guess a category and default shelf life from keywords."""
        normalized = normalize_item_name(item_name)
        for category, keywords, days in _FALLBACK_KEYWORDS:
            if any(keyword in normalized for keyword in keywords):
                return CategoryGuess(category=category, expiration_days=days)
        return CategoryGuess(
            category=ProductCategory.OTHER, expiration_days=_FALLBACK_DEFAULT_DAYS
        )

    def storage_for(self, item_name: str) -> list[str]:
        """Return storage conditions from the entry or the category table."""
        entry = self.lookup(item_name)
        if entry is not None:
            return list(entry.storage_conditions)
        normalized = normalize_item_name(item_name)
        for category, conditions in _CATEGORY_STORAGE.items():
            keywords = _CATEGORY_KEYWORDS.get(category, ())
            if category.value in normalized or any(
                keyword in normalized for keyword in keywords
            ):
                return list(conditions)
        return list(DEFAULT_STORAGE)


def normalize_item_name(item_name: str) -> str:
    """Case-fold and trim an item name for lookups."""
    return item_name.strip().lower()


def normalize_brand(brand: str) -> str:
    """Normalize a brand label to a knowledge base key."""
    return "_".join(brand.strip().lower().split())


def season_for(day: date) -> str:
    """Return the northern-hemisphere season for a date."""
    if day.month in {3, 4, 5}:
        return "spring"
    if day.month in {6, 7, 8}:
        return "summer"
    if day.month in {9, 10, 11}:
        return "fall"
    return "winter"
