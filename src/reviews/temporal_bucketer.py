"""
Temporal Bucketer
==================

Groups dated reviews into hour-of-day, day-of-week and month buckets and
reports the activity patterns that stand out.

Reviews without a parseable date are skipped. A granularity with no
significant pattern simply contributes nothing.

Usage:
    bucketer = TemporalBucketer()
    buckets = bucketer.bucket(reviews)
    patterns = bucketer.detect_patterns(buckets, context)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .analysis_config import TemporalConfig
from .review_models import (
    BusinessContext,
    PatternPoint,
    PatternType,
    Review,
    SentimentLabel,
    TemporalPattern,
    TrendDirection,
    safe_ratio,
)

logger = logging.getLogger(__name__)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass
class TimeBucket:
    """Aggregates for the reviews falling in one time unit."""
    key: str
    count: int = 0
    rating_total: float = 0.0
    positive_count: int = 0
    response_count: int = 0

    def add(self, review: Review):
        self.count += 1
        self.rating_total += review.rating
        if review.sentiment == SentimentLabel.POSITIVE:
            self.positive_count += 1
        if review.has_owner_response:
            self.response_count += 1

    @property
    def average_rating(self) -> float:
        return safe_ratio(self.rating_total, self.count)

    @property
    def positive_rate(self) -> float:
        """Share of positive reviews, in percent."""
        return safe_ratio(self.positive_count, self.count) * 100

    @property
    def response_rate(self) -> float:
        """Share of reviews with an owner response, in percent."""
        return safe_ratio(self.response_count, self.count) * 100


@dataclass
class TemporalBuckets:
    hourly: Dict[int, TimeBucket] = field(default_factory=dict)
    weekly: Dict[str, TimeBucket] = field(default_factory=dict)
    monthly: Dict[str, TimeBucket] = field(default_factory=dict)   # ascending, gaps filled
    dated_reviews: int = 0


def month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def _month_range(first: str, last: str) -> List[str]:
    """All YYYY-MM keys from first to last inclusive."""
    year, month = int(first[:4]), int(first[5:7])
    end_year, end_month = int(last[:4]), int(last[5:7])
    keys = []
    while (year, month) <= (end_year, end_month):
        keys.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return keys


def _series(labels: Sequence[str], values: Sequence[float]) -> List[PatternPoint]:
    """Pattern points, each marked against the previous value."""
    points = []
    previous = None
    for label, value in zip(labels, values):
        if previous is None or value == previous:
            trend = TrendDirection.STABLE
        elif value > previous:
            trend = TrendDirection.IMPROVING
        else:
            trend = TrendDirection.DECLINING
        points.append(PatternPoint(period=label, value=value, trend=trend))
        previous = value
    return points


class TemporalBucketer:
    """Hour/day/month bucketing plus peak and shift detection."""

    def __init__(self, config: Optional[TemporalConfig] = None):
        self.config = config or TemporalConfig()

    def bucket(self, reviews: Iterable[Review]) -> TemporalBuckets:
        """Aggregate dated reviews into hourly, weekly and monthly buckets."""
        buckets = TemporalBuckets(
            hourly={h: TimeBucket(key=f"{h:02d}:00") for h in range(24)},
            weekly={d: TimeBucket(key=d) for d in DAY_NAMES},
        )
        monthly: Dict[str, TimeBucket] = {}
        skipped = 0

        for review in reviews:
            moment = review.published_date
            if moment is None:
                skipped += 1
                continue
            buckets.dated_reviews += 1
            buckets.hourly[moment.hour].add(review)
            buckets.weekly[DAY_NAMES[moment.weekday()]].add(review)
            key = month_key(moment)
            monthly.setdefault(key, TimeBucket(key=key)).add(review)

        if monthly:
            observed = sorted(monthly)
            buckets.monthly = {
                key: monthly.get(key, TimeBucket(key=key))
                for key in _month_range(observed[0], observed[-1])
            }

        if skipped:
            logger.debug(f"Skipped {skipped} reviews without a usable date")
        return buckets

    def candidate_hours(
        self,
        buckets: TemporalBuckets,
        context: Optional[BusinessContext] = None,
    ) -> List[int]:
        """
        Hours considered in the peak search.

        Restricted to the operating window of the declared hours type; falls
        back to the whole day when that window holds no reviews.
        """
        all_hours = list(range(24))
        if context is None or not context.hours_type:
            return all_hours

        window = self.config.operating_hours.get(context.hours_type.strip().lower())
        if window is None:
            return all_hours

        start, end = window
        restricted = [h for h in all_hours if start <= h < end]
        if not any(buckets.hourly[h].count for h in restricted):
            return all_hours
        return restricted

    def find_peaks(self, counts: Dict) -> List:
        """Keys whose count exceeds the mean count by more than the peak ratio."""
        if not counts:
            return []
        mean = safe_ratio(sum(counts.values()), len(counts))
        if mean == 0:
            return []
        return [key for key, count in counts.items() if count > mean * self.config.peak_ratio]

    def detect_patterns(
        self,
        buckets: TemporalBuckets,
        context: Optional[BusinessContext] = None,
    ) -> List[TemporalPattern]:
        patterns = []
        for detector in (self._daily_pattern, self._weekly_pattern, self._monthly_pattern):
            pattern = detector(buckets, context)
            if pattern is not None:
                patterns.append(pattern)
        return patterns

    def analyze(
        self,
        reviews: Iterable[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[TemporalPattern]:
        return self.detect_patterns(self.bucket(reviews), context)

    # -------------------------------------------------------------------------
    # Pattern detectors
    # -------------------------------------------------------------------------

    def _daily_pattern(self, buckets, context) -> Optional[TemporalPattern]:
        hours = self.candidate_hours(buckets, context)
        counts = {h: buckets.hourly[h].count for h in hours}
        peaks = self.find_peaks(counts)
        if not peaks:
            return None

        mean = safe_ratio(sum(counts.values()), len(counts))
        top = max(peaks, key=lambda h: counts[h])
        deviation = safe_ratio(counts[top] - mean, mean)
        if deviation <= self.config.daily_min_deviation:
            return None

        peak_reviews = sum(buckets.hourly[h].count for h in peaks)
        peak_rating = safe_ratio(sum(buckets.hourly[h].rating_total for h in peaks), peak_reviews)
        labels = ", ".join(buckets.hourly[h].key for h in peaks)
        description = (
            f"Review activity peaks at {labels}: {deviation:.0%} above the average hour "
            f"(peak-hour rating {peak_rating:.1f} stars)"
        )
        return TemporalPattern(
            pattern=PatternType.DAILY,
            description=description,
            strength=round(min(1.0, deviation), 3),
            series=_series([buckets.hourly[h].key for h in hours], [counts[h] for h in hours]),
        )

    def _weekly_pattern(self, buckets, context) -> Optional[TemporalPattern]:
        counts = {day: buckets.weekly[day].count for day in DAY_NAMES}
        total = sum(counts.values())
        if total == 0:
            return None

        weekend = [d for d in DAY_NAMES if d in self.config.weekend_days]
        weekdays = [d for d in DAY_NAMES if d not in self.config.weekend_days]
        weekend_avg = safe_ratio(sum(counts[d] for d in weekend), len(weekend))
        weekday_avg = safe_ratio(sum(counts[d] for d in weekdays), len(weekdays))
        deviation = safe_ratio(weekend_avg - weekday_avg, weekday_avg)

        if abs(deviation) > self.config.weekly_min_deviation:
            direction = "higher" if deviation > 0 else "lower"
            description = (
                f"Weekend review activity is {abs(deviation):.0%} {direction} than on weekdays "
                f"({weekend_avg:.1f} vs {weekday_avg:.1f} reviews per day)"
            )
        else:
            peaks = self.find_peaks(counts)
            if not peaks:
                return None
            mean = safe_ratio(total, len(counts))
            top = max(peaks, key=lambda d: counts[d])
            deviation = safe_ratio(counts[top] - mean, mean)
            if deviation <= self.config.weekly_min_deviation:
                return None
            description = (
                f"{', '.join(peaks)} {'is the busiest day' if len(peaks) == 1 else 'are the busiest days'} "
                f"for reviews, {deviation:.0%} above the daily average"
            )

        return TemporalPattern(
            pattern=PatternType.WEEKLY,
            description=description,
            strength=round(min(1.0, abs(deviation)), 3),
            series=_series(list(DAY_NAMES), [counts[d] for d in DAY_NAMES]),
        )

    def _monthly_pattern(self, buckets, context) -> Optional[TemporalPattern]:
        window = self.config.monthly_window
        keys = list(buckets.monthly)
        if len(keys) < window * 2:
            return None

        counts = [buckets.monthly[k].count for k in keys]
        recent = safe_ratio(sum(counts[-window:]), window)
        prior = safe_ratio(sum(counts[-2 * window:-window]), window)
        change = safe_ratio(recent - prior, prior)
        if abs(change) <= self.config.monthly_min_change:
            return None

        direction = "up" if change > 0 else "down"
        description = (
            f"Monthly review volume is {direction} {abs(change):.0%} over the last {window} months "
            f"compared with the previous {window} ({recent:.1f} vs {prior:.1f} reviews per month)"
        )
        return TemporalPattern(
            pattern=PatternType.MONTHLY,
            description=description,
            strength=round(min(1.0, abs(change)), 3),
            series=_series(keys, counts),
        )
