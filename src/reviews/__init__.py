"""
Enhanced Review Analysis Engine
================================

Deterministic analysis of a business's customer reviews: temporal patterns,
historical trends with forecasts, review clusters, seasonal patterns and
synthesized insights. No ML required: rating thresholds, keyword
frequencies and rule tables.

Modules:
    review_models       — Input records and analysis outputs
    analysis_config     — Thresholds and lookup tables
    review_keywords     — Keyword extraction shared by the analyzers
    temporal_bucketer   — Hour/day/month bucketing and activity patterns
    trend_analyzer      — Monthly trend classification and forecasting
    review_clustering   — Rating, theme and sentiment clusters
    seasonal_analyzer   — Hemisphere-aware seasonal comparison
    review_insights     — Key findings, opportunities and risks
    enhanced_analyzer   — analyze() entry point
    review_loader       — Raw rows / JSON / database -> Review records
"""

from .review_models import (
    Review,
    BusinessContext,
    Location,
    TemporalPattern,
    HistoricalTrend,
    ReviewCluster,
    ClusterSummary,
    SeasonalPattern,
    AnalysisInsights,
    EnhancedAnalysisResult,
)
from .analysis_config import AnalysisConfig
from .enhanced_analyzer import EnhancedReviewAnalyzer, analyze
from .review_loader import review_from_row, load_reviews_from_json, load_reviews_from_db
