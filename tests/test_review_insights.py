"""
Tests for insight synthesis (key findings, opportunities, risks).

Usage:
    pytest tests/test_review_insights.py -v
"""

from src.reviews.review_insights import InsightSynthesizer
from src.reviews.review_models import (
    BusinessContext,
    Forecast,
    HistoricalTrend,
    PatternType,
    ReviewCluster,
    Season,
    SeasonalPattern,
    SeasonMetrics,
    SentimentLabel,
    TemporalPattern,
    TrendDirection,
)


def make_pattern(strength: float, kind=PatternType.DAILY, description: str = "Peak at 12:00") -> TemporalPattern:
    return TemporalPattern(pattern=kind, description=description, strength=strength)


def make_trend(direction: TrendDirection, forecast: Forecast = None) -> HistoricalTrend:
    return HistoricalTrend(
        metric="Average Rating",
        timeframe="2024-01 to 2024-06",
        series=[],
        trend=direction,
        forecast=forecast,
    )


def make_cluster(
    name: str,
    count: int,
    sentiment: SentimentLabel,
    rating: float = 4.5,
    keywords=("coffee", "friendly", "staff", "cake"),
    cluster_id: str = "rating-5",
) -> ReviewCluster:
    return ReviewCluster(
        id=cluster_id,
        name=name,
        description="",
        review_count=count,
        average_rating=rating,
        sentiment=sentiment,
        keywords=list(keywords),
    )


def make_season(comparison: float, season: Season = Season.SUMMER) -> SeasonalPattern:
    return SeasonalPattern(
        season=season,
        name=f"{season.value.capitalize()} Season",
        date_range="Jun - Aug",
        metrics=SeasonMetrics(avg_rating=4.0, review_volume=12, sentiment_score=0.8),
        comparison_vs_year_average=comparison,
    )


class TestGenericInsights:

    def setup_method(self):
        self.synthesizer = InsightSynthesizer()

    def test_key_findings_need_strength_above_threshold(self):
        insights = self.synthesizer.synthesize(
            [make_pattern(0.9, description="Strong"), make_pattern(0.7, description="Borderline")],
            [], [], [],
        )
        assert insights.key_findings == ["Strong"]

    def test_trend_directions(self):
        forecast = Forecast(next_period="2024-07", predicted_value=4.6, confidence=0.7)
        insights = self.synthesizer.synthesize(
            [],
            [make_trend(TrendDirection.IMPROVING, forecast), make_trend(TrendDirection.DECLINING),
             make_trend(TrendDirection.STABLE)],
            [], [],
        )
        assert insights.opportunities == [
            "Average Rating is improving (2024-01 to 2024-06); build on the momentum. "
            "Next period forecast: 4.6 (2024-07)."
        ]
        assert insights.risks == ["Average Rating is declining (2024-01 to 2024-06); investigate the cause."]

    def test_positive_cluster_needs_more_than_twenty_reviews(self):
        big = make_cluster("Delighted Customers", 21, SentimentLabel.POSITIVE)
        exact = make_cluster("Positive Sentiment", 20, SentimentLabel.POSITIVE)
        insights = self.synthesizer.synthesize([], [], [big, exact], [])
        assert insights.opportunities == [
            "Delighted Customers (21 reviews, 4.5 stars) is a strength to promote: coffee, friendly, staff."
        ]

    def test_negative_cluster_is_a_risk_regardless_of_size(self):
        small = make_cluster(
            "Dissatisfied Customers", 3, SentimentLabel.NEGATIVE, rating=1.0,
            keywords=("slow", "rude"), cluster_id="rating-low",
        )
        insights = self.synthesizer.synthesize([], [], [small], [])
        assert insights.risks == ["Dissatisfied Customers: 3 reviews averaging 1.0 stars, citing slow, rude."]
        assert insights.opportunities == []

    def test_season_deviation(self):
        insights = self.synthesizer.synthesize(
            [], [], [],
            [make_season(25.0), make_season(-12.0, Season.WINTER), make_season(10.0, Season.FALL)],
        )
        assert insights.opportunities == [
            "Summer Season (Jun - Aug) outperforms the yearly average by 25%; plan promotions around it."
        ]
        assert insights.risks == ["Winter Season (Jun - Aug) underperforms the yearly average by 12%."]

    def test_empty_inputs(self):
        insights = self.synthesizer.synthesize([], [], [], [], BusinessContext(hours_type="standard"))
        assert insights.key_findings == []
        assert insights.opportunities == []
        assert insights.risks == []


class TestContextInsights:

    def setup_method(self):
        self.synthesizer = InsightSynthesizer()
        self.service = make_cluster(
            "Service Theme", 6, SentimentLabel.NEGATIVE, rating=1.8, cluster_id="theme-service",
        )
        self.specialty = make_cluster(
            "Latte Art (Specialty)", 4, SentimentLabel.POSITIVE, cluster_id="theme-latte-art",
        )

    def test_context_free_run_adds_nothing_extra(self):
        insights = self.synthesizer.synthesize([], [], [self.service, self.specialty], [])
        assert insights.key_findings == []
        assert len(insights.risks) == 1
        assert insights.opportunities == []

    def test_service_quality_finding(self):
        insights = self.synthesizer.synthesize(
            [], [], [self.service], [], BusinessContext(business_type="restaurant"),
        )
        assert insights.key_findings == [
            "Service quality issues: 6 negative reviews in 'Service Theme'."
        ]
        # Generic risk still present
        assert insights.risks[0].startswith("Service Theme: 6 reviews")

    def test_premium_positioning_risk(self):
        insights = self.synthesizer.synthesize(
            [], [], [self.service], [], BusinessContext(price_range="Luxury"),
        )
        assert len(insights.risks) == 2
        assert insights.risks[1].startswith("'Service Theme' threatens luxury positioning")

    def test_specialty_opportunity(self):
        insights = self.synthesizer.synthesize(
            [], [], [self.specialty], [], BusinessContext(specialties=["latte art"]),
        )
        assert insights.opportunities == [
            "Specialty 'Latte Art (Specialty)' is well received (4.5 stars); feature it prominently."
        ]

    def test_operating_hours_finding(self):
        daily = make_pattern(0.4, description="Review activity peaks at 12:00")
        weekly = make_pattern(0.4, kind=PatternType.WEEKLY, description="Weekend")
        insights = self.synthesizer.synthesize(
            [daily, weekly], [], [], [], BusinessContext(hours_type="standard"),
        )
        assert insights.key_findings == [
            "Within standard operating hours: Review activity peaks at 12:00."
        ]
