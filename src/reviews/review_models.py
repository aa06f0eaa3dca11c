"""
Review Analysis Data Models
============================

Input records and structured outputs of the enhanced review analysis engine.
Every output object is created fresh on each analyze() call and never persisted.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import logging
import re

logger = logging.getLogger(__name__)


class SentimentLabel(str, Enum):
    """Sentiment classes carried by reviews and clusters."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class TrendDirection(str, Enum):
    """Qualitative direction of a metric across periods."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class PatternType(str, Enum):
    """Granularity of a temporal pattern."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


_VALID_LABELS = {s.value for s in SentimentLabel}

_TAG_DELIMITERS = re.compile(r"[,;]")


def split_tags(value: Any) -> Tuple[str, ...]:
    """
    Normalize a comma/semicolon-delimited string (or list) into clean tags.

    Empty fragments and case-insensitive duplicates are dropped; first
    spelling wins.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        parts = _TAG_DELIMITERS.split(value)
    elif isinstance(value, (list, tuple)):
        parts = [str(v) for v in value if v is not None]
    else:
        raise TypeError(f"tags must be a string or a list of strings, got {type(value).__name__}")

    tags = []
    seen = set()
    for part in parts:
        tag = " ".join(part.split())
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        tags.append(tag)
    return tuple(tags)


def parse_review_date(value: Any) -> Optional[datetime]:
    """
    Parse a review timestamp.

    Accepts datetime, date, or ISO-8601 strings (a trailing 'Z' is allowed).
    Returns None for anything missing or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.debug(f"Unparseable review date: {value!r}")
            return None
    return None


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return numerator / denominator


def rating_sentiment(rating: float) -> SentimentLabel:
    """Rating-threshold fallback: >=4 positive, <=2 negative, else neutral."""
    if rating >= 4:
        return SentimentLabel.POSITIVE
    if rating <= 2:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


@dataclass(frozen=True)
class Review:
    """Normalized read-only view of one customer review."""
    rating: int
    text: str = ""
    published_at: Optional[Union[datetime, str]] = None
    sentiment_label: Optional[str] = None
    theme_tags: Tuple[str, ...] = ()
    staff_mentions: Tuple[str, ...] = ()
    owner_response_text: Optional[str] = None
    review_id: Optional[str] = None

    def __post_init__(self):
        # A bare string would otherwise be iterated character by character
        object.__setattr__(self, "theme_tags", split_tags(self.theme_tags))
        object.__setattr__(self, "staff_mentions", split_tags(self.staff_mentions))

    @property
    def published_date(self) -> Optional[datetime]:
        return parse_review_date(self.published_at)

    @property
    def sentiment(self) -> SentimentLabel:
        """Precomputed label when valid, rating heuristic otherwise."""
        label = (self.sentiment_label or "").strip().lower()
        if label in _VALID_LABELS:
            return SentimentLabel(label)
        return rating_sentiment(self.rating)

    @property
    def has_owner_response(self) -> bool:
        return bool(self.owner_response_text and self.owner_response_text.strip())


@dataclass
class Location:
    country: str = ""
    city: str = ""


@dataclass
class BusinessContext:
    """
    Optional business description supplied by the caller.

    Only influences thresholds, labels and recommendations; every rule that
    reads it has a generic fallback.
    """
    business_type: str = ""
    hours_type: Optional[str] = None      # standard | extended | evening | 24hour | weekends
    price_range: Optional[str] = None     # budget | medium | premium | luxury
    location: Optional[Location] = None
    specialties: List[str] = field(default_factory=list)

    @property
    def normalized_type(self) -> str:
        return (self.business_type or "").strip().lower()

    @property
    def normalized_price(self) -> str:
        return (self.price_range or "").strip().lower()

    @property
    def country(self) -> str:
        if self.location is None:
            return ""
        return (self.location.country or "").strip()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BusinessContext":
        """Build a context from a plain mapping (camelCase or snake_case keys)."""
        if not isinstance(data, Mapping):
            raise TypeError(f"Business context must be a mapping, got {type(data).__name__}")

        location = data.get("location")
        if isinstance(location, Mapping):
            location = Location(
                country=str(location.get("country", "") or ""),
                city=str(location.get("city", "") or ""),
            )
        elif location is not None and not isinstance(location, Location):
            raise TypeError("Business context 'location' must be a mapping")

        specialties = data.get("specialties") or []
        if isinstance(specialties, str):
            specialties = [specialties]

        return cls(
            business_type=str(data.get("businessType", data.get("business_type", "")) or ""),
            hours_type=data.get("hoursType", data.get("hours_type")),
            price_range=data.get("priceRange", data.get("price_range")),
            location=location,
            specialties=[str(s) for s in specialties],
        )


# =============================================================================
# ANALYSIS OUTPUTS
# =============================================================================

@dataclass
class PatternPoint:
    period: str
    value: float
    trend: TrendDirection = TrendDirection.STABLE


@dataclass
class TemporalPattern:
    """A significant activity pattern at one time granularity."""
    pattern: PatternType
    description: str
    strength: float             # 0.0 to 1.0
    series: List[PatternPoint] = field(default_factory=list)


@dataclass
class TrendPoint:
    period: str
    value: float
    percent_change: float = 0.0


@dataclass
class Forecast:
    """One-period-ahead linear projection with a fixed heuristic confidence."""
    next_period: str
    predicted_value: float
    confidence: float


@dataclass
class HistoricalTrend:
    metric: str
    timeframe: str
    series: List[TrendPoint]
    trend: TrendDirection
    forecast: Optional[Forecast] = None


@dataclass
class ReviewCluster:
    """A named cohort of reviews sharing a rating tier, theme or sentiment."""
    id: str
    name: str
    description: str
    review_count: int
    average_rating: float
    sentiment: SentimentLabel
    keywords: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)     # max 3 verbatim texts
    staff: List[str] = field(default_factory=list)        # most mentioned staff, max 3
    insights: List[str] = field(default_factory=list)


@dataclass
class ClusterSummary:
    """Headline figures across all clusters of one analysis."""
    total_clusters: int = 0
    largest_cluster: Optional[str] = None
    most_positive_cluster: Optional[str] = None
    most_negative_cluster: Optional[str] = None
    unclustered_reviews: int = 0   # reviews in no rating-tier or theme cluster


@dataclass
class SeasonMetrics:
    avg_rating: float
    review_volume: int
    sentiment_score: float      # fraction of reviews rated >= 4
    top_themes: List[str] = field(default_factory=list)
    response_rate: float = 0.0  # fraction of reviews with an owner response


@dataclass
class SeasonalPattern:
    season: Season
    name: str
    date_range: str
    metrics: SeasonMetrics
    comparison_vs_year_average: float   # percent
    recommendations: List[str] = field(default_factory=list)


@dataclass
class AnalysisInsights:
    key_findings: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)


@dataclass
class EnhancedAnalysisResult:
    """Aggregate output of one analyze() call."""
    temporal_patterns: List[TemporalPattern] = field(default_factory=list)
    historical_trends: List[HistoricalTrend] = field(default_factory=list)
    review_clusters: List[ReviewCluster] = field(default_factory=list)
    cluster_summary: ClusterSummary = field(default_factory=ClusterSummary)
    seasonal_patterns: List[SeasonalPattern] = field(default_factory=list)
    insights: AnalysisInsights = field(default_factory=AnalysisInsights)
    reviews_analyzed: int = 0
    reviews_with_dates: int = 0

    @property
    def is_empty(self) -> bool:
        return not (
            self.temporal_patterns
            or self.historical_trends
            or self.review_clusters
            or self.seasonal_patterns
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping (enums flattened to their values)."""
        return _plain(asdict(self))


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
