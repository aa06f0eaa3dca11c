"""
Tests for hemisphere-aware seasonal analysis.

Usage:
    pytest tests/test_seasonal_analyzer.py -v
"""

from datetime import datetime

import pytest

from src.reviews.review_models import BusinessContext, Location, Review, Season
from src.reviews.seasonal_analyzer import SeasonalAnalyzer, assign_season, season_date_range


def make_reviews(date: str, rating: int = 4, count: int = 10, text: str = "", **kwargs):
    return [Review(rating=rating, text=text, published_at=date, **kwargs) for _ in range(count)]


def located(country: str, business_type: str = "") -> BusinessContext:
    return BusinessContext(business_type=business_type, location=Location(country=country))


class TestSeasonMapping:

    def test_winter_spans_year_boundary(self):
        assert assign_season(datetime(2023, 12, 15)) == Season.WINTER
        assert assign_season(datetime(2024, 1, 15)) == Season.WINTER
        assert assign_season(datetime(2024, 2, 29)) == Season.WINTER
        assert assign_season(datetime(2024, 3, 1)) == Season.SPRING

    def test_southern_hemisphere_swap(self):
        assert assign_season(datetime(2024, 1, 15), southern=True) == Season.SUMMER
        assert assign_season(datetime(2024, 7, 15), southern=True) == Season.WINTER
        assert assign_season(datetime(2024, 4, 15), southern=True) == Season.FALL

    def test_every_month_has_a_season(self):
        for southern in (False, True):
            seasons = [assign_season(datetime(2024, m, 1), southern) for m in range(1, 13)]
            assert all(s in Season for s in seasons)
            assert set(seasons) == set(Season)

    def test_date_ranges(self):
        assert season_date_range(Season.WINTER) == "Dec - Feb"
        assert season_date_range(Season.SUMMER, southern=True) == "Dec - Feb"
        assert season_date_range(Season.FALL) == "Sep - Nov"

    def test_southern_countries(self):
        analyzer = SeasonalAnalyzer()
        assert analyzer.is_southern(located("Australia"))
        assert analyzer.is_southern(located("AU"))
        assert analyzer.is_southern(located("New Zealand"))
        assert not analyzer.is_southern(located("France"))
        assert not analyzer.is_southern(BusinessContext())
        assert not analyzer.is_southern(None)


class TestSeasonMetrics:

    def setup_method(self):
        self.analyzer = SeasonalAnalyzer()

    def test_season_needs_ten_reviews(self):
        assert self.analyzer.analyze(make_reviews("2024-07-10", count=9)) == []
        patterns = self.analyzer.analyze(make_reviews("2024-07-10", count=10))
        assert len(patterns) == 1
        assert patterns[0].season == Season.SUMMER
        assert patterns[0].name == "Summer Season"
        assert patterns[0].date_range == "Jun - Aug"

    def test_december_and_january_share_winter(self):
        reviews = make_reviews("2023-12-15", count=5) + make_reviews("2024-01-15", count=5)
        patterns = self.analyzer.analyze(reviews)
        assert [p.season for p in patterns] == [Season.WINTER]
        assert patterns[0].metrics.review_volume == 10

    def test_australian_january_is_summer(self):
        patterns = self.analyzer.analyze(make_reviews("2024-01-15"), located("Australia"))
        assert [p.season for p in patterns] == [Season.SUMMER]
        assert patterns[0].date_range == "Dec - Feb"

    def test_metrics(self):
        reviews = (
            make_reviews("2024-04-10", rating=5, count=3, owner_response_text="Thank you!")
            + make_reviews("2024-04-11", rating=5, count=3)
            + make_reviews("2024-04-12", rating=2, count=4)
        )
        metrics = self.analyzer.analyze(reviews)[0].metrics
        assert metrics.avg_rating == 3.8
        assert metrics.review_volume == 10
        assert metrics.sentiment_score == 0.6
        assert metrics.response_rate == 0.3

    def test_undated_reviews_are_skipped(self):
        reviews = make_reviews("2024-04-10") + make_reviews(None, count=5) + make_reviews("31/12/2024", count=5)
        patterns = self.analyzer.analyze(reviews)
        assert patterns[0].metrics.review_volume == 10

    def test_comparison_vs_year_average(self):
        reviews = make_reviews("2024-07-10", rating=5) + make_reviews("2024-01-10", rating=3)
        patterns = {p.season: p for p in self.analyzer.analyze(reviews)}
        assert patterns[Season.SUMMER].comparison_vs_year_average == pytest.approx(25.0)
        assert patterns[Season.WINTER].comparison_vs_year_average == pytest.approx(-25.0)

    def test_top_themes_from_text(self):
        reviews = make_reviews("2024-04-10", text="Sunny terrace, great brunch")
        assert self.analyzer.analyze(reviews)[0].metrics.top_themes == ["sunny", "terrace", "great", "brunch"]


class TestRecommendations:

    def setup_method(self):
        self.analyzer = SeasonalAnalyzer()

    def _recs(self, reviews, context=None):
        return {p.season: p.recommendations for p in self.analyzer.analyze(reviews, context)}

    def test_strong_summer(self):
        recs = self._recs(make_reviews("2024-07-10", rating=5))
        assert recs[Season.SUMMER] == ["Capitalize on strong summer ratings with seasonal events and promotions."]

    def test_strong_summer_for_cafe(self):
        recs = self._recs(make_reviews("2024-07-10", rating=5), BusinessContext(business_type="cafe"))
        assert recs[Season.SUMMER] == [
            "Capitalize on strong summer ratings with seasonal events, outdoor seating and cold drink specials."
        ]

    def test_weak_winter(self):
        recs = self._recs(make_reviews("2024-01-10", rating=3))
        assert recs[Season.WINTER] == ["Improve winter offerings to lift cold-season satisfaction."]

    def test_weak_other_season(self):
        recs = self._recs(make_reviews("2024-10-10", rating=3))
        assert recs[Season.FALL] == ["Review fall operations: the average rating is only 3.0 stars."]

    def test_deviation_rules(self):
        recs = self._recs(make_reviews("2024-07-10", rating=5) + make_reviews("2024-01-10", rating=3))
        assert recs[Season.SUMMER] == [
            "Capitalize on strong summer ratings with seasonal events and promotions.",
            "Showcase summer strengths in marketing: ratings run 25% above the yearly average.",
        ]
        assert recs[Season.WINTER] == [
            "Improve winter offerings to lift cold-season satisfaction.",
            "Investigate the winter dip: ratings run 25% below the yearly average.",
        ]

    def test_crowding_keywords(self):
        reviews = make_reviews("2024-04-10", text="busy and crowded terrace")
        assert self._recs(reviews)[Season.SPRING] == [
            "Implement a reservation system to manage busy spring periods."
        ]
        assert self._recs(reviews, BusinessContext(business_type="museum"))[Season.SPRING] == [
            "Introduce timed-entry tickets to manage spring crowds."
        ]

    def test_default_recommendation(self):
        assert self._recs(make_reviews("2024-04-10"))[Season.SPRING] == [
            "Maintain current spring service standards."
        ]
