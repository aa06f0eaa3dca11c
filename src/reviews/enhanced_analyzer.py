"""
Enhanced Review Analyzer
=========================

Entry point of the review analysis engine. Runs the temporal, trend,
clustering and seasonal analyzers over the same review list, then feeds
their outputs to the insight synthesizer.

The analysis is a pure function of its input: no I/O, no shared state, so
concurrent calls for different businesses are safe.

Usage:
    from src.reviews import analyze, BusinessContext

    result = analyze(reviews)
    result = analyze(reviews, BusinessContext(business_type="cafe"))
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .analysis_config import AnalysisConfig, DEFAULT_CONFIG
from .review_clustering import ReviewClusterer
from .review_insights import InsightSynthesizer
from .review_models import BusinessContext, EnhancedAnalysisResult, Review
from .seasonal_analyzer import SeasonalAnalyzer
from .temporal_bucketer import TemporalBucketer
from .trend_analyzer import TrendAnalyzer

logger = logging.getLogger(__name__)


class EnhancedReviewAnalyzer:
    """
    Configurable analysis engine.

    One instance can be reused across calls and threads: analyzers keep only
    their (immutable) configuration.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.temporal = TemporalBucketer(self.config.temporal)
        self.trends = TrendAnalyzer(self.config.trends, self.config.temporal)
        self.clusterer = ReviewClusterer(self.config.clustering, self.config.keywords)
        self.seasonal = SeasonalAnalyzer(self.config.seasonal, self.config.keywords)
        self.synthesizer = InsightSynthesizer(self.config.insights)

    def analyze(
        self,
        reviews: Sequence[Review],
        context: Optional[BusinessContext] = None,
    ) -> EnhancedAnalysisResult:
        """
        Analyze a business's reviews.

        Args:
            reviews: Review records; dirty data (bad dates, empty text) is tolerated.
            context: Optional business description.

        Returns:
            EnhancedAnalysisResult, all collections empty for an empty list.

        Raises:
            ValueError: reviews is None.
            TypeError: reviews is not a list of Review, or context has the wrong type.
        """
        reviews = _validate(reviews, context)
        started = time.monotonic()

        if not reviews:
            logger.info("No reviews to analyze")
            return EnhancedAnalysisResult()

        if self.config.parallel:
            patterns, trends, clusters, seasons = self._run_parallel(reviews, context)
        else:
            patterns = self.temporal.analyze(reviews, context)
            trends = self.trends.analyze(reviews, context)
            clusters = self.clusterer.cluster(reviews, context)
            seasons = self.seasonal.analyze(reviews, context)

        insights = self.synthesizer.synthesize(patterns, trends, clusters, seasons, context)
        result = EnhancedAnalysisResult(
            temporal_patterns=patterns,
            historical_trends=trends,
            review_clusters=clusters,
            cluster_summary=self.clusterer.summarize(reviews, clusters, context),
            seasonal_patterns=seasons,
            insights=insights,
            reviews_analyzed=len(reviews),
            reviews_with_dates=sum(1 for r in reviews if r.published_date is not None),
        )

        duration = time.monotonic() - started
        logger.info(
            f"Analyzed {len(reviews)} reviews in {duration:.3f}s: "
            f"{len(patterns)} patterns, {len(trends)} trends, "
            f"{len(clusters)} clusters, {len(seasons)} seasons",
            extra={"stage": "analysis", "duration": round(duration, 3), "reviews": len(reviews)},
        )
        return result

    def _run_parallel(self, reviews: List[Review], context: Optional[BusinessContext]):
        with ThreadPoolExecutor(max_workers=4, thread_name_prefix="review-analysis") as pool:
            patterns = pool.submit(self.temporal.analyze, reviews, context)
            trends = pool.submit(self.trends.analyze, reviews, context)
            clusters = pool.submit(self.clusterer.cluster, reviews, context)
            seasons = pool.submit(self.seasonal.analyze, reviews, context)
            return patterns.result(), trends.result(), clusters.result(), seasons.result()


def _validate(reviews, context) -> List[Review]:
    """Fail fast on caller misuse; dirty review data is not misuse."""
    if reviews is None:
        raise ValueError("reviews must be a list of Review records, got None")
    if isinstance(reviews, (str, bytes)) or not hasattr(reviews, "__iter__"):
        raise TypeError(f"reviews must be a list of Review records, got {type(reviews).__name__}")

    reviews = list(reviews)
    for index, review in enumerate(reviews):
        if not isinstance(review, Review):
            raise TypeError(
                f"reviews[{index}] must be a Review, got {type(review).__name__}"
            )

    if context is not None and not isinstance(context, BusinessContext):
        raise TypeError(
            f"context must be a BusinessContext or None, got {type(context).__name__}"
        )
    return reviews


_default_analyzer = EnhancedReviewAnalyzer()


def analyze(
    reviews: Sequence[Review],
    context: Optional[BusinessContext] = None,
) -> EnhancedAnalysisResult:
    """Analyze reviews with the default configuration."""
    return _default_analyzer.analyze(reviews, context)
