"""
Trend Analyzer
===============

Turns monthly aggregates into per-period changes, a qualitative trend
(improving / declining / stable) and a one-step-ahead forecast.

The forecast is a deliberately simple linear extrapolation with a fixed
confidence of 0.7. It is a planning hint, not a statistical model.

Usage:
    analyzer = TrendAnalyzer()
    trends = analyzer.analyze(reviews, context)
    trend = analyzer.analyze_series(TrendMetric.AVERAGE_RATING, [("2024-01", 4.1), ...])
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .analysis_config import TemporalConfig, TrendConfig
from .review_models import (
    BusinessContext,
    Forecast,
    HistoricalTrend,
    Review,
    TrendDirection,
    TrendPoint,
    safe_ratio,
)
from .temporal_bucketer import TemporalBucketer, TimeBucket

logger = logging.getLogger(__name__)


class TrendMetric(str, Enum):
    AVERAGE_RATING = "Average Rating"
    REVIEW_VOLUME = "Review Volume"
    POSITIVE_SENTIMENT = "Positive Sentiment Rate"
    RESPONSE_RATE = "Owner Response Rate"


# Rate metrics are already percentages: their change is a point delta.
RATE_METRICS = frozenset({TrendMetric.POSITIVE_SENTIMENT, TrendMetric.RESPONSE_RATE})

# Valid range per metric, used to clamp forecasts.
METRIC_BOUNDS: Dict[TrendMetric, Tuple[float, Optional[float]]] = {
    TrendMetric.AVERAGE_RATING: (1.0, 5.0),
    TrendMetric.REVIEW_VOLUME: (0.0, None),
    TrendMetric.POSITIVE_SENTIMENT: (0.0, 100.0),
    TrendMetric.RESPONSE_RATE: (0.0, 100.0),
}


def next_month(period: str) -> str:
    """'2024-12' -> '2025-01'."""
    year, month = int(period[:4]), int(period[5:7])
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"


class TrendAnalyzer:
    """Per-metric trend classification over monthly series."""

    def __init__(
        self,
        config: Optional[TrendConfig] = None,
        temporal_config: Optional[TemporalConfig] = None,
    ):
        self.config = config or TrendConfig()
        self.bucketer = TemporalBucketer(temporal_config)

    def threshold_for(self, metric: TrendMetric, context: Optional[BusinessContext] = None) -> float:
        """Classification threshold; rating sensitivity depends on positioning."""
        cfg = self.config
        if metric == TrendMetric.REVIEW_VOLUME:
            return cfg.volume_threshold
        if metric == TrendMetric.POSITIVE_SENTIMENT:
            return cfg.sentiment_threshold
        if metric == TrendMetric.RESPONSE_RATE:
            return cfg.response_threshold

        if context is not None:
            if (context.normalized_price in cfg.premium_price_ranges
                    or context.normalized_type in cfg.premium_business_types):
                return cfg.rating_threshold_premium
            if context.normalized_price in cfg.budget_price_ranges:
                return cfg.rating_threshold_budget
        return cfg.rating_threshold

    def percent_changes(self, values: Sequence[float], metric: TrendMetric) -> List[float]:
        """
        Change of each period versus the previous one.

        The first period has no lookback and is 0 by definition. A zero
        previous value also yields 0.
        """
        changes = []
        for i, value in enumerate(values):
            if i == 0:
                changes.append(0.0)
                continue
            previous = values[i - 1]
            if metric in RATE_METRICS:
                changes.append(value - previous)
            else:
                changes.append(safe_ratio(value - previous, previous) * 100)
        return changes

    def classify(
        self,
        changes: Sequence[float],
        metric: TrendMetric,
        context: Optional[BusinessContext] = None,
    ) -> TrendDirection:
        """Mean change over the latest window against the metric threshold."""
        if not changes:
            return TrendDirection.STABLE
        window = list(changes[-self.config.window:])
        mean_change = sum(window) / len(window)
        threshold = self.threshold_for(metric, context)
        if mean_change > threshold:
            return TrendDirection.IMPROVING
        if mean_change < -threshold:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def forecast(self, series: Sequence[Tuple[str, float]], metric: TrendMetric) -> Optional[Forecast]:
        """
        Linear one-period projection.

        delta = (last value - first value of window) / window length, with the
        window being the latest periods (at most config.window).
        """
        if len(series) < self.config.forecast_min_periods:
            return None

        window = [value for _period, value in series[-self.config.window:]]
        delta = (window[-1] - window[0]) / len(window)
        predicted = window[-1] + delta

        low, high = METRIC_BOUNDS[metric]
        predicted = max(low, predicted)
        if high is not None:
            predicted = min(high, predicted)

        return Forecast(
            next_period=next_month(series[-1][0]),
            predicted_value=round(predicted, 3),
            confidence=self.config.forecast_confidence,
        )

    def analyze_series(
        self,
        metric: TrendMetric,
        series: Sequence[Tuple[str, float]],
        context: Optional[BusinessContext] = None,
    ) -> Optional[HistoricalTrend]:
        """
        Analyze one chronologically sorted (period, value) series.

        Returns None when there are fewer than config.min_periods periods.
        """
        if len(series) < self.config.min_periods:
            return None

        values = [value for _period, value in series]
        changes = self.percent_changes(values, metric)
        points = [
            TrendPoint(period=period, value=round(value, 3), percent_change=round(change, 2))
            for (period, value), change in zip(series, changes)
        ]
        first, last = series[0][0], series[-1][0]

        return HistoricalTrend(
            metric=metric.value,
            timeframe=f"{first} to {last}",
            series=points,
            trend=self.classify(changes, metric, context),
            forecast=self.forecast(series, metric),
        )

    def monthly_series(self, monthly: Dict[str, TimeBucket]) -> Dict[TrendMetric, List[Tuple[str, float]]]:
        """
        Per-metric series from monthly buckets.

        Months without reviews are skipped for every metric; a gap in the
        data is not a month with zero reviews.
        """
        filled = [(key, bucket) for key, bucket in monthly.items() if bucket.count > 0]
        return {
            TrendMetric.AVERAGE_RATING: [(k, b.average_rating) for k, b in filled],
            TrendMetric.REVIEW_VOLUME: [(k, float(b.count)) for k, b in filled],
            TrendMetric.POSITIVE_SENTIMENT: [(k, b.positive_rate) for k, b in filled],
            TrendMetric.RESPONSE_RATE: [(k, b.response_rate) for k, b in filled],
        }

    def analyze(
        self,
        reviews: Iterable[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[HistoricalTrend]:
        monthly = self.bucketer.bucket(reviews).monthly
        trends = []
        for metric, series in self.monthly_series(monthly).items():
            trend = self.analyze_series(metric, series, context)
            if trend is not None:
                trends.append(trend)
        logger.debug(f"Trend analysis: {len(monthly)} months, {len(trends)} trends")
        return trends
