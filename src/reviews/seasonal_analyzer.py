"""
Seasonal Analyzer
==================

Maps dated reviews onto calendar seasons, compares each season with the
yearly average and produces season-specific recommendations.

Season membership is by calendar month, so winter (Dec-Feb in the northern
hemisphere) spans the year boundary without any date arithmetic: December
2023 and January 2024 are both winter. Businesses located in a southern
hemisphere country get the swapped table.

Usage:
    analyzer = SeasonalAnalyzer()
    seasons = analyzer.analyze(reviews, context)
"""

import calendar
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .analysis_config import KeywordConfig, SeasonalConfig, business_category
from .review_keywords import extract_keywords
from .review_models import (
    BusinessContext,
    Review,
    Season,
    SeasonalPattern,
    SeasonMetrics,
    safe_ratio,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SEASON TABLES
# =============================================================================

NORTHERN_SEASONS: Dict[Season, Tuple[int, ...]] = {
    Season.SPRING: (3, 4, 5),
    Season.SUMMER: (6, 7, 8),
    Season.FALL: (9, 10, 11),
    Season.WINTER: (12, 1, 2),
}

_HEMISPHERE_SWAP = {
    Season.SPRING: Season.FALL,
    Season.SUMMER: Season.WINTER,
    Season.FALL: Season.SPRING,
    Season.WINTER: Season.SUMMER,
}

SOUTHERN_SEASONS: Dict[Season, Tuple[int, ...]] = {
    season: NORTHERN_SEASONS[_HEMISPHERE_SWAP[season]] for season in Season
}

_MONTH_TO_SEASON = {
    False: {m: s for s, months in NORTHERN_SEASONS.items() for m in months},
    True: {m: s for s, months in SOUTHERN_SEASONS.items() for m in months},
}


def assign_season(moment: datetime, southern: bool = False) -> Season:
    """Season of a date; every month maps to exactly one season."""
    return _MONTH_TO_SEASON[bool(southern)][moment.month]


def season_date_range(season: Season, southern: bool = False) -> str:
    months = (SOUTHERN_SEASONS if southern else NORTHERN_SEASONS)[season]
    return f"{calendar.month_abbr[months[0]]} - {calendar.month_abbr[months[-1]]}"


# =============================================================================
# RECOMMENDATION RULES
# =============================================================================
# Each rule: (predicate, messages by business category).
# The None key is the context-free fallback and is mandatory.
# Messages are formatted with season, avg and deviation.

RulePredicate = Callable[[Season, SeasonMetrics, float, SeasonalConfig], bool]


def _has_crowding(metrics: SeasonMetrics, config: SeasonalConfig) -> bool:
    return any(
        marker in theme
        for theme in metrics.top_themes
        for marker in config.crowding_keywords
    )


RECOMMENDATION_RULES: List[Tuple[RulePredicate, Dict[Optional[str], str]]] = [
    (
        lambda s, m, d, c: s == Season.SUMMER and m.avg_rating > c.strong_summer_rating,
        {
            None: "Capitalize on strong summer ratings with seasonal events and promotions.",
            "food": "Capitalize on strong summer ratings with seasonal events, outdoor seating and cold drink specials.",
            "nightlife": "Capitalize on strong summer ratings with events such as live music or patio nights.",
            "culture": "Capitalize on strong summer ratings with summer exhibitions and extended opening hours.",
        },
    ),
    (
        lambda s, m, d, c: s == Season.WINTER and m.avg_rating < c.weak_winter_rating,
        {
            None: "Improve winter offerings to lift cold-season satisfaction.",
            "food": "Improve winter offerings with warm seasonal menu items and a cosier atmosphere.",
            "nightlife": "Improve winter offerings with indoor events and seasonal drinks.",
            "lodging": "Improve winter offerings: review heating, comfort and off-season packages.",
        },
    ),
    (
        lambda s, m, d, c: s != Season.WINTER and m.avg_rating < c.weak_season_rating,
        {
            None: "Review {season} operations: the average rating is only {avg:.1f} stars.",
        },
    ),
    (
        lambda s, m, d, c: _has_crowding(m, c),
        {
            None: "Implement a reservation system to manage busy {season} periods.",
            "culture": "Introduce timed-entry tickets to manage {season} crowds.",
            "retail": "Add staff at peak {season} hours to shorten queues.",
        },
    ),
    (
        lambda s, m, d, c: d < -c.notable_deviation,
        {
            None: "Investigate the {season} dip: ratings run {deviation:.0f}% below the yearly average.",
        },
    ),
    (
        lambda s, m, d, c: d > c.notable_deviation,
        {
            None: "Showcase {season} strengths in marketing: ratings run {deviation:.0f}% above the yearly average.",
        },
    ),
]

DEFAULT_RECOMMENDATION = "Maintain current {season} service standards."


class SeasonalAnalyzer:
    """Hemisphere-aware seasonal comparison with rule-based recommendations."""

    def __init__(
        self,
        config: Optional[SeasonalConfig] = None,
        keyword_config: Optional[KeywordConfig] = None,
    ):
        self.config = config or SeasonalConfig()
        self.keyword_config = keyword_config or KeywordConfig()

    def is_southern(self, context: Optional[BusinessContext] = None) -> bool:
        if context is None:
            return False
        return context.country.lower() in self.config.southern_countries

    def group_by_season(self, reviews: Iterable[Review], southern: bool = False) -> Dict[Season, List[Review]]:
        """Every dated review lands in exactly one season; undated ones are skipped."""
        groups: Dict[Season, List[Review]] = {season: [] for season in Season}
        for review in reviews:
            moment = review.published_date
            if moment is None:
                continue
            groups[assign_season(moment, southern)].append(review)
        return groups

    def analyze(
        self,
        reviews: Iterable[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[SeasonalPattern]:
        southern = self.is_southern(context)
        groups = self.group_by_season(reviews, southern)

        dated = [r for members in groups.values() for r in members]
        year_average = safe_ratio(sum(r.rating for r in dated), len(dated))

        patterns = []
        for season in Season:
            members = groups[season]
            if len(members) < self.config.min_season_reviews:
                if members:
                    logger.debug(f"Skipping {season.value}: only {len(members)} reviews")
                continue
            patterns.append(self._season_pattern(season, members, year_average, southern, context))
        return patterns

    def _season_pattern(
        self,
        season: Season,
        members: List[Review],
        year_average: float,
        southern: bool,
        context: Optional[BusinessContext],
    ) -> SeasonalPattern:
        count = len(members)
        avg_rating = safe_ratio(sum(r.rating for r in members), count)
        positive = sum(1 for r in members if r.rating >= self.config.positive_rating)
        responded = sum(1 for r in members if r.has_owner_response)

        metrics = SeasonMetrics(
            avg_rating=round(avg_rating, 2),
            review_volume=count,
            sentiment_score=round(safe_ratio(positive, count), 3),
            top_themes=extract_keywords(members, top_n=self.config.top_themes, config=self.keyword_config),
            response_rate=round(safe_ratio(responded, count), 3),
        )
        comparison = round(safe_ratio(avg_rating - year_average, year_average) * 100, 2)

        return SeasonalPattern(
            season=season,
            name=f"{season.value.capitalize()} Season",
            date_range=season_date_range(season, southern),
            metrics=metrics,
            comparison_vs_year_average=comparison,
            recommendations=self.recommendations(season, metrics, comparison, context),
        )

    def recommendations(
        self,
        season: Season,
        metrics: SeasonMetrics,
        comparison: float,
        context: Optional[BusinessContext] = None,
    ) -> List[str]:
        """Apply the rule table; business-specific wording when a category is known."""
        category = business_category(context.business_type) if context else None
        values = {"season": season.value, "avg": metrics.avg_rating, "deviation": abs(comparison)}

        recommendations = []
        for predicate, messages in RECOMMENDATION_RULES:
            if not predicate(season, metrics, comparison, self.config):
                continue
            template = messages.get(category, messages[None])
            recommendations.append(template.format(**values))

        if not recommendations:
            recommendations.append(DEFAULT_RECOMMENDATION.format(**values))
        return recommendations
