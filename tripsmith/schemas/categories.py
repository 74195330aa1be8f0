"""
schemas/categories.py
---------------------
Closed activity-category enum plus the lookup tables every stage shares.

Raw category strings (English or Vietnamese, any case) are normalized exactly
once, at the boundary, via normalize_category().  Anything unmapped becomes
Category.OTHER.  Category.TRAVEL is reserved for synthetic travel segments
created by the scheduler; an externally supplied "travel" maps to TRANSPORT.
"""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    # accommodation
    HOTEL         = "hotel"
    HOSTEL        = "hostel"
    APARTMENT     = "apartment"
    ACCOMMODATION = "accommodation"
    # food
    RESTAURANT    = "restaurant"
    CAFE          = "cafe"
    BAR           = "bar"
    FAST_FOOD     = "fast_food"
    BAKERY        = "bakery"
    STREET_FOOD   = "street_food"
    FINE_DINING   = "fine_dining"
    DESSERT       = "dessert"
    FOOD          = "food"
    # attractions
    MUSEUM        = "museum"
    ART_GALLERY   = "art_gallery"
    PARK          = "park"
    MONUMENT      = "monument"
    HISTORIC      = "historic"
    ZOO           = "zoo"
    THEME_PARK    = "theme_park"
    BEACH         = "beach"
    MOUNTAIN      = "mountain"
    LAKE          = "lake"
    ATTRACTION    = "attraction"
    CULTURAL      = "cultural"
    # entertainment
    THEATER       = "theater"
    CINEMA        = "cinema"
    SHOPPING      = "shopping"
    NIGHTLIFE     = "nightlife"
    SPA           = "spa"
    ENTERTAINMENT = "entertainment"
    TOUR          = "tour"
    # transport
    TRANSPORT     = "transport"
    TAXI          = "taxi"
    BUS           = "bus"
    TRAIN         = "train"
    SUBWAY        = "subway"
    # synthetic travel segment, scheduler-only
    TRAVEL        = "travel"
    OTHER         = "other"


class BudgetBucket(str, Enum):
    ACCOMMODATION  = "accommodation"
    FOOD           = "food"
    ATTRACTIONS    = "attractions"
    TRANSPORTATION = "transportation"
    OTHER          = "other"


# ── Normalization table ──────────────────────────────────────────────────────
# Keys are lower-cased, stripped raw strings.  Enum values map to themselves.
_SYNONYMS: dict[str, Category] = {
    # English variants
    "lodging":        Category.ACCOMMODATION,
    "guesthouse":     Category.HOSTEL,
    "resort":         Category.HOTEL,
    "homestay":       Category.APARTMENT,
    "dining":         Category.RESTAURANT,
    "coffee":         Category.CAFE,
    "coffee shop":    Category.CAFE,
    "pub":            Category.BAR,
    "fast food":      Category.FAST_FOOD,
    "fast-food":      Category.FAST_FOOD,
    "street food":    Category.STREET_FOOD,
    "street-food":    Category.STREET_FOOD,
    "fine dining":    Category.FINE_DINING,
    "fine-dining":    Category.FINE_DINING,
    "meal":           Category.FOOD,
    "art gallery":    Category.ART_GALLERY,
    "gallery":        Category.ART_GALLERY,
    "garden":         Category.PARK,
    "landmark":       Category.MONUMENT,
    "heritage":       Category.HISTORIC,
    "historical":     Category.HISTORIC,
    "temple":         Category.CULTURAL,
    "pagoda":         Category.CULTURAL,
    "culture":        Category.CULTURAL,
    "theme park":     Category.THEME_PARK,
    "amusement park": Category.THEME_PARK,
    "sightseeing":    Category.ATTRACTION,
    "attractions":    Category.ATTRACTION,
    "theatre":        Category.THEATER,
    "movie":          Category.CINEMA,
    "market":         Category.SHOPPING,
    "mall":           Category.SHOPPING,
    "night life":     Category.NIGHTLIFE,
    "wellness":       Category.SPA,
    "transportation": Category.TRANSPORT,
    "transfer":       Category.TRANSPORT,
    "travel":         Category.TRANSPORT,
    "metro":          Category.SUBWAY,
    "tours":          Category.TOUR,
    # Vietnamese
    "khách sạn":      Category.HOTEL,
    "nhà nghỉ":       Category.HOSTEL,
    "lưu trú":        Category.ACCOMMODATION,
    "ăn uống":        Category.FOOD,
    "ẩm thực":        Category.FOOD,
    "nhà hàng":       Category.RESTAURANT,
    "quán ăn":        Category.RESTAURANT,
    "cà phê":         Category.CAFE,
    "quán cà phê":    Category.CAFE,
    "ăn vặt":         Category.STREET_FOOD,
    "tham quan":      Category.ATTRACTION,
    "bảo tàng":       Category.MUSEUM,
    "công viên":      Category.PARK,
    "di tích":        Category.HISTORIC,
    "chùa":           Category.CULTURAL,
    "văn hóa":        Category.CULTURAL,
    "bãi biển":       Category.BEACH,
    "biển":           Category.BEACH,
    "núi":            Category.MOUNTAIN,
    "hồ":             Category.LAKE,
    "giải trí":       Category.ENTERTAINMENT,
    "mua sắm":        Category.SHOPPING,
    "chợ":            Category.SHOPPING,
    "di chuyển":      Category.TRANSPORT,
    "phương tiện":    Category.TRANSPORT,
    "khác":           Category.OTHER,
}


def normalize_category(raw: object) -> Category:
    """
    Map a raw category value to the closed Category enum.

    Only the scheduler may produce Category.TRAVEL, so a raw "travel" is
    folded into TRANSPORT here.
    """
    if isinstance(raw, Category):
        return Category.TRANSPORT if raw is Category.TRAVEL else raw
    if not isinstance(raw, str):
        return Category.OTHER
    key = " ".join(raw.strip().lower().replace("_", " ").split())
    if key in _SYNONYMS:
        return _SYNONYMS[key]
    try:
        category = Category(key.replace(" ", "_"))
    except ValueError:
        return Category.OTHER
    return Category.TRANSPORT if category is Category.TRAVEL else category


# ── Budget buckets ───────────────────────────────────────────────────────────
_BUCKET_MEMBERS: dict[BudgetBucket, frozenset[Category]] = {
    BudgetBucket.ACCOMMODATION: frozenset({
        Category.HOTEL, Category.HOSTEL, Category.APARTMENT, Category.ACCOMMODATION,
    }),
    BudgetBucket.FOOD: frozenset({
        Category.RESTAURANT, Category.CAFE, Category.BAR, Category.FAST_FOOD,
        Category.BAKERY, Category.STREET_FOOD, Category.FINE_DINING,
        Category.DESSERT, Category.FOOD,
    }),
    BudgetBucket.ATTRACTIONS: frozenset({
        Category.MUSEUM, Category.ART_GALLERY, Category.PARK, Category.MONUMENT,
        Category.HISTORIC, Category.ZOO, Category.THEME_PARK, Category.BEACH,
        Category.MOUNTAIN, Category.LAKE, Category.ATTRACTION, Category.CULTURAL,
    }),
    BudgetBucket.TRANSPORTATION: frozenset({
        Category.TRAVEL, Category.TRANSPORT, Category.TAXI, Category.BUS,
        Category.TRAIN, Category.SUBWAY,
    }),
}


def budget_bucket(category: Category) -> BudgetBucket:
    """Budget bucket for a category; everything unlisted is OTHER."""
    for bucket, members in _BUCKET_MEMBERS.items():
        if category in members:
            return bucket
    return BudgetBucket.OTHER


# ── Weather exposure ─────────────────────────────────────────────────────────
INDOOR_CATEGORIES: frozenset[Category] = frozenset({
    Category.MUSEUM, Category.ART_GALLERY, Category.THEATER, Category.CINEMA,
    Category.SHOPPING, Category.RESTAURANT, Category.CAFE, Category.BAR,
    Category.FAST_FOOD, Category.BAKERY, Category.FINE_DINING, Category.DESSERT,
    Category.SPA,
})

OUTDOOR_CATEGORIES: frozenset[Category] = frozenset({
    Category.PARK, Category.MONUMENT, Category.HISTORIC, Category.ZOO,
    Category.THEME_PARK, Category.BEACH, Category.MOUNTAIN, Category.LAKE,
    Category.STREET_FOOD, Category.CULTURAL,
})


def is_indoor(category: Category) -> bool:
    return category in INDOOR_CATEGORIES


def is_outdoor(category: Category) -> bool:
    return category in OUTDOOR_CATEGORIES
