"""
Thresholds and tables for the enhanced review analysis engine.

Every threshold the analyzers use is declared here so that the analysis code
carries no magic numbers. Values can be tuned per deployment by building a
custom AnalysisConfig and passing it to EnhancedReviewAnalyzer.

The defaults follow the context-aware variant of the engine: business context
tightens or loosens thresholds where premium or budget positioning changes
how much a small movement matters.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple


def _keyword_pattern(keywords: Tuple[str, ...]) -> "re.Pattern":
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})s?\b")


# Business-type keywords -> business category. First match wins.
BUSINESS_CATEGORIES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("cafe", "café", "coffee", "restaurant", "bakery", "bistro", "diner"), "food"),
    (("bar", "pub", "club", "brewery", "lounge"), "nightlife"),
    (("gallery", "museum", "exhibition"), "culture"),
    (("hotel", "hostel", "inn", "resort"), "lodging"),
    (("retail", "shop", "store", "boutique"), "retail"),
)

# Keywords match whole words only ("barbershop" is not a shop, "public" is not a pub).
_CATEGORY_PATTERNS = tuple(
    (_keyword_pattern(keywords), category) for keywords, category in BUSINESS_CATEGORIES
)


def business_category(business_type: Optional[str]) -> Optional[str]:
    """Map a free-text business type onto a known category, or None."""
    normalized = re.sub(r"[_\-]+", " ", (business_type or "").strip().lower())
    if not normalized:
        return None
    for pattern, category in _CATEGORY_PATTERNS:
        if pattern.search(normalized):
            return category
    return None


@dataclass(frozen=True)
class KeywordConfig:
    """Keyword extraction (shared by clustering, seasons and insights)."""
    min_token_length: int = 4          # tokens of length <= 3 are dropped
    top_n: int = 10
    stopwords: FrozenSet[str] = frozenset({
        "the", "and", "was", "for", "with", "this", "that", "have", "from", "were",
    })


@dataclass(frozen=True)
class TemporalConfig:
    """
    Temporal bucketing and pattern significance.

    A bucket is a peak when its count exceeds the mean bucket count by more
    than peak_ratio. Patterns are reported only past the deviation thresholds.
    """
    peak_ratio: float = 1.5
    daily_min_deviation: float = 0.20
    weekly_min_deviation: float = 0.20
    monthly_min_change: float = 0.10
    monthly_window: int = 3            # compare latest N months with the N before

    # Operating windows as [start_hour, end_hour) per hours type.
    # None means the full day is plausible.
    operating_hours: Dict[str, Optional[Tuple[int, int]]] = field(default_factory=lambda: {
        "standard": (9, 17),
        "extended": (7, 22),
        "evening": (16, 23),
        "weekends": (10, 18),
        "24hour": None,
    })

    weekend_days: Tuple[str, ...] = ("Saturday", "Sunday")


@dataclass(frozen=True)
class TrendConfig:
    """
    Trend classification and forecasting.

    Rating thresholds are in percent change per period; rate metrics
    (positive sentiment, owner response) are in percentage points.
    """
    window: int = 6
    min_periods: int = 2
    forecast_min_periods: int = 3
    forecast_confidence: float = 0.7

    rating_threshold: float = 0.5
    rating_threshold_premium: float = 0.3   # luxury price range / gallery
    rating_threshold_budget: float = 0.8
    volume_threshold: float = 5.0
    sentiment_threshold: float = 2.0
    response_threshold: float = 2.0

    premium_price_ranges: FrozenSet[str] = frozenset({"luxury"})
    premium_business_types: FrozenSet[str] = frozenset({"gallery"})
    budget_price_ranges: FrozenSet[str] = frozenset({"budget"})


@dataclass(frozen=True)
class ClusteringConfig:
    """Cluster membership thresholds and labels."""
    min_theme_reviews: int = 5
    min_specialty_theme_reviews: int = 3
    max_examples: int = 3
    insight_keywords: int = 3

    # Staff associated with a cluster: named in at least N member reviews.
    min_staff_mentions: int = 2
    min_staff_name_length: int = 2
    max_staff: int = 3

    # Business category -> audience noun used in rating-tier names.
    audience_nouns: Dict[str, str] = field(default_factory=lambda: {
        "food": "Diners",
        "nightlife": "Patrons",
        "culture": "Visitors",
        "lodging": "Guests",
        "retail": "Shoppers",
    })
    default_audience: str = "Customers"


@dataclass(frozen=True)
class SeasonalConfig:
    """Season mapping and recommendation thresholds."""
    min_season_reviews: int = 10
    top_themes: int = 5
    positive_rating: int = 4            # sentiment score counts ratings >= this
    strong_summer_rating: float = 4.0
    weak_winter_rating: float = 3.5
    weak_season_rating: float = 3.5
    notable_deviation: float = 10.0     # percent vs yearly average

    crowding_keywords: Tuple[str, ...] = ("crowd", "busy", "packed", "queue")

    southern_countries: FrozenSet[str] = frozenset({
        "australia", "new zealand", "south africa", "argentina", "chile",
        "brazil", "uruguay", "paraguay",
        "au", "nz", "za", "ar", "cl", "br", "uy", "py",
    })


@dataclass(frozen=True)
class InsightConfig:
    """Insight synthesis gates."""
    min_pattern_strength: float = 0.7
    min_opportunity_cluster_size: int = 20
    season_deviation: float = 10.0
    premium_price_ranges: FrozenSet[str] = frozenset({"premium", "luxury"})


@dataclass(frozen=True)
class AnalysisConfig:
    """Complete engine configuration."""
    keywords: KeywordConfig = field(default_factory=KeywordConfig)
    temporal: TemporalConfig = field(default_factory=TemporalConfig)
    trends: TrendConfig = field(default_factory=TrendConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    seasonal: SeasonalConfig = field(default_factory=SeasonalConfig)
    insights: InsightConfig = field(default_factory=InsightConfig)

    # Run the four analyzers on a thread pool before synthesis.
    parallel: bool = False


DEFAULT_CONFIG = AnalysisConfig()
