"""
API Models
==========

Pydantic request/response models for the analysis API.
Responses mirror EnhancedAnalysisResult.to_dict().
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ============================================================================
# REQUESTS
# ============================================================================

class ReviewInput(BaseModel):
    """One review as sent by the presentation layer."""
    rating: int = Field(..., ge=1, le=5)
    text: str = ""
    published_at: Optional[str] = None
    sentiment: Optional[str] = None
    theme_tags: Union[str, List[str], None] = None
    staff_mentions: Union[str, List[str], None] = None
    owner_response_text: Optional[str] = None
    review_id: Optional[str] = None


class LocationInput(BaseModel):
    country: str = ""
    city: str = ""


class BusinessContextInput(BaseModel):
    business_type: str = ""
    hours_type: Optional[str] = None
    price_range: Optional[str] = None
    location: Optional[LocationInput] = None
    specialties: List[str] = Field(default_factory=list)


class AnalysisRequest(BaseModel):
    reviews: List[ReviewInput]
    context: Optional[BusinessContextInput] = None


# ============================================================================
# RESPONSES
# ============================================================================

class PatternPointResponse(BaseModel):
    period: str
    value: float
    trend: str


class TemporalPatternResponse(BaseModel):
    pattern: str
    description: str
    strength: float
    series: List[PatternPointResponse]


class TrendPointResponse(BaseModel):
    period: str
    value: float
    percent_change: float


class ForecastResponse(BaseModel):
    next_period: str
    predicted_value: float
    confidence: float


class HistoricalTrendResponse(BaseModel):
    metric: str
    timeframe: str
    series: List[TrendPointResponse]
    trend: str
    forecast: Optional[ForecastResponse] = None


class ReviewClusterResponse(BaseModel):
    id: str
    name: str
    description: str
    review_count: int
    average_rating: float
    sentiment: str
    keywords: List[str]
    examples: List[str]
    staff: List[str]
    insights: List[str]


class ClusterSummaryResponse(BaseModel):
    total_clusters: int
    largest_cluster: Optional[str] = None
    most_positive_cluster: Optional[str] = None
    most_negative_cluster: Optional[str] = None
    unclustered_reviews: int


class SeasonMetricsResponse(BaseModel):
    avg_rating: float
    review_volume: int
    sentiment_score: float
    top_themes: List[str]
    response_rate: float


class SeasonalPatternResponse(BaseModel):
    season: str
    name: str
    date_range: str
    metrics: SeasonMetricsResponse
    comparison_vs_year_average: float
    recommendations: List[str]


class InsightsResponse(BaseModel):
    key_findings: List[str]
    opportunities: List[str]
    risks: List[str]


class AnalysisResponse(BaseModel):
    temporal_patterns: List[TemporalPatternResponse]
    historical_trends: List[HistoricalTrendResponse]
    review_clusters: List[ReviewClusterResponse]
    cluster_summary: ClusterSummaryResponse
    seasonal_patterns: List[SeasonalPatternResponse]
    insights: InsightsResponse
    reviews_analyzed: int
    reviews_with_dates: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    database: str
