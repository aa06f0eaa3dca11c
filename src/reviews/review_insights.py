"""
Review Insight Synthesizer
===========================

Aggregates the temporal, trend, cluster and seasonal outputs into three
bulleted lists: key findings, opportunities and risks.

Pure aggregation: nothing is re-read from the reviews. Duplicates across
sources are allowed, the output is a report rather than a set.

Usage:
    synthesizer = InsightSynthesizer()
    insights = synthesizer.synthesize(patterns, trends, clusters, seasons, context)
"""

import logging
from typing import List, Optional, Sequence

from .analysis_config import InsightConfig
from .review_clustering import SPECIALTY_SUFFIX
from .review_models import (
    AnalysisInsights,
    BusinessContext,
    HistoricalTrend,
    PatternType,
    ReviewCluster,
    SeasonalPattern,
    SentimentLabel,
    TemporalPattern,
    TrendDirection,
)

logger = logging.getLogger(__name__)


def _forecast_note(trend: HistoricalTrend) -> str:
    if trend.forecast is None:
        return ""
    return f" Next period forecast: {trend.forecast.predicted_value:g} ({trend.forecast.next_period})."


class InsightSynthesizer:
    """
    Rule-based insight generation over analyzer outputs.

    Generic rules always run. Business-context rules only append.
    """

    def __init__(self, config: Optional[InsightConfig] = None):
        self.config = config or InsightConfig()

    def synthesize(
        self,
        temporal_patterns: Sequence[TemporalPattern],
        historical_trends: Sequence[HistoricalTrend],
        review_clusters: Sequence[ReviewCluster],
        seasonal_patterns: Sequence[SeasonalPattern],
        context: Optional[BusinessContext] = None,
    ) -> AnalysisInsights:
        insights = AnalysisInsights(
            key_findings=self.key_findings(temporal_patterns),
            opportunities=self.opportunities(historical_trends, review_clusters, seasonal_patterns),
            risks=self.risks(historical_trends, review_clusters, seasonal_patterns),
        )
        if context is not None:
            self._add_context_insights(insights, temporal_patterns, review_clusters, context)

        logger.debug(
            f"Insights: {len(insights.key_findings)} findings, "
            f"{len(insights.opportunities)} opportunities, {len(insights.risks)} risks"
        )
        return insights

    def key_findings(self, temporal_patterns: Sequence[TemporalPattern]) -> List[str]:
        return [
            p.description for p in temporal_patterns
            if p.strength > self.config.min_pattern_strength
        ]

    def opportunities(
        self,
        trends: Sequence[HistoricalTrend],
        clusters: Sequence[ReviewCluster],
        seasons: Sequence[SeasonalPattern],
    ) -> List[str]:
        items = []
        for trend in trends:
            if trend.trend == TrendDirection.IMPROVING:
                items.append(
                    f"{trend.metric} is improving ({trend.timeframe}); build on the momentum."
                    + _forecast_note(trend)
                )
        for cluster in clusters:
            if (cluster.sentiment == SentimentLabel.POSITIVE
                    and cluster.review_count > self.config.min_opportunity_cluster_size):
                terms = ", ".join(cluster.keywords[:3])
                items.append(
                    f"{cluster.name} ({cluster.review_count} reviews, {cluster.average_rating:.1f} stars) "
                    f"is a strength to promote" + (f": {terms}." if terms else ".")
                )
        for season in seasons:
            if season.comparison_vs_year_average > self.config.season_deviation:
                items.append(
                    f"{season.name} ({season.date_range}) outperforms the yearly average by "
                    f"{season.comparison_vs_year_average:.0f}%; plan promotions around it."
                )
        return items

    def risks(
        self,
        trends: Sequence[HistoricalTrend],
        clusters: Sequence[ReviewCluster],
        seasons: Sequence[SeasonalPattern],
    ) -> List[str]:
        items = []
        for trend in trends:
            if trend.trend == TrendDirection.DECLINING:
                items.append(
                    f"{trend.metric} is declining ({trend.timeframe}); investigate the cause."
                    + _forecast_note(trend)
                )
        for cluster in clusters:
            if cluster.sentiment == SentimentLabel.NEGATIVE:
                terms = ", ".join(cluster.keywords[:3])
                items.append(
                    f"{cluster.name}: {cluster.review_count} reviews averaging "
                    f"{cluster.average_rating:.1f} stars" + (f", citing {terms}." if terms else ".")
                )
        for season in seasons:
            if season.comparison_vs_year_average < -self.config.season_deviation:
                items.append(
                    f"{season.name} ({season.date_range}) underperforms the yearly average by "
                    f"{abs(season.comparison_vs_year_average):.0f}%."
                )
        return items

    def _add_context_insights(
        self,
        insights: AnalysisInsights,
        temporal_patterns: Sequence[TemporalPattern],
        clusters: Sequence[ReviewCluster],
        context: BusinessContext,
    ):
        for cluster in clusters:
            if cluster.sentiment != SentimentLabel.NEGATIVE:
                continue
            if "service" in cluster.name.lower():
                insights.key_findings.append(
                    f"Service quality issues: {cluster.review_count} negative reviews in '{cluster.name}'."
                )
            if context.normalized_price in self.config.premium_price_ranges:
                insights.risks.append(
                    f"'{cluster.name}' threatens {context.normalized_price} positioning: "
                    f"customers paying premium prices expect consistency."
                )

        for cluster in clusters:
            if (cluster.id.startswith("theme-")
                    and cluster.name.endswith(SPECIALTY_SUFFIX)
                    and cluster.sentiment == SentimentLabel.POSITIVE):
                insights.opportunities.append(
                    f"Specialty '{cluster.name}' is well received ({cluster.average_rating:.1f} stars); "
                    f"feature it prominently."
                )

        if context.hours_type:
            for pattern in temporal_patterns:
                if pattern.pattern == PatternType.DAILY:
                    insights.key_findings.append(
                        f"Within {context.hours_type} operating hours: {pattern.description}."
                    )
