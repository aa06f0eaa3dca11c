"""
Review Clustering Engine
=========================

Partitions reviews into named cohorts along three independent axes:
rating tier, theme tag and sentiment. The strategies are not exclusive, so
one review can belong to several clusters.

Usage:
    clusterer = ReviewClusterer()
    clusters = clusterer.cluster(reviews, context)
    summary = clusterer.summarize(reviews, clusters, context)
    similar = find_similar_reviews(target, reviews, limit=5)
"""

import logging
from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence, Set

from .analysis_config import ClusteringConfig, KeywordConfig, business_category
from .review_keywords import extract_keywords, tokenize
from .review_models import (
    BusinessContext,
    ClusterSummary,
    Review,
    ReviewCluster,
    SentimentLabel,
    rating_sentiment,
    safe_ratio,
)

logger = logging.getLogger(__name__)

SPECIALTY_SUFFIX = "(Specialty)"

SENTIMENT_ORDER = (
    SentimentLabel.POSITIVE,
    SentimentLabel.NEUTRAL,
    SentimentLabel.NEGATIVE,
    SentimentLabel.MIXED,
)


def _mean_rating(reviews: Sequence[Review]) -> float:
    return safe_ratio(sum(r.rating for r in reviews), len(reviews))


def _normalize_tag(tag: str) -> str:
    return " ".join(tag.strip().lower().split())


def _is_delighted(review: Review) -> bool:
    return review.rating == 5


def _is_dissatisfied(review: Review) -> bool:
    return review.rating <= 2


class ReviewClusterer:
    """Rating-tier, theme and sentiment clustering with templated insights."""

    def __init__(
        self,
        config: Optional[ClusteringConfig] = None,
        keyword_config: Optional[KeywordConfig] = None,
    ):
        self.config = config or ClusteringConfig()
        self.keyword_config = keyword_config or KeywordConfig()

    def audience_noun(self, context: Optional[BusinessContext] = None) -> str:
        """Label for the business's customers ("Diners", "Patrons", ...)."""
        if context is None:
            return self.config.default_audience
        category = business_category(context.business_type)
        return self.config.audience_nouns.get(category, self.config.default_audience)

    def cluster(
        self,
        reviews: Sequence[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[ReviewCluster]:
        """Run all three strategies and rank the combined clusters."""
        if not reviews:
            return []

        clusters = []
        clusters.extend(self.cluster_by_rating(reviews, context))
        clusters.extend(self.cluster_by_theme(reviews, context))
        clusters.extend(self.cluster_by_sentiment(reviews))

        logger.debug(f"Clustering produced {len(clusters)} clusters from {len(reviews)} reviews")
        return self.rank_clusters(clusters)

    def rank_clusters(self, clusters: List[ReviewCluster]) -> List[ReviewCluster]:
        """Largest first, then the cluster furthest from a neutral 3-star rating."""
        return sorted(
            clusters,
            key=lambda c: (-c.review_count, -abs(c.average_rating - 3)),
        )

    def summarize(
        self,
        reviews: Sequence[Review],
        clusters: Sequence[ReviewCluster],
        context: Optional[BusinessContext] = None,
    ) -> ClusterSummary:
        """
        Headline figures for a clustering run.

        Ties go to the cluster listed first. A review counts as unclustered
        when it falls in no rating-tier or theme cluster; every review has a
        sentiment, so sentiment clusters are left out of that count.
        """
        if not clusters:
            return ClusterSummary(unclustered_reviews=len(reviews))

        largest = most_positive = most_negative = clusters[0]
        for cluster in clusters[1:]:
            if cluster.review_count > largest.review_count:
                largest = cluster
            if cluster.average_rating > most_positive.average_rating:
                most_positive = cluster
            if cluster.average_rating < most_negative.average_rating:
                most_negative = cluster

        themes: Set[str] = {group[0] for group in self._theme_groups(reviews, context)}
        unclustered = sum(
            1 for review in reviews
            if not (_is_delighted(review) or _is_dissatisfied(review))
            and not any(_normalize_tag(tag) in themes for tag in review.theme_tags)
        )

        return ClusterSummary(
            total_clusters=len(clusters),
            largest_cluster=largest.name,
            most_positive_cluster=most_positive.name,
            most_negative_cluster=most_negative.name,
            unclustered_reviews=unclustered,
        )

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    def cluster_by_rating(
        self,
        reviews: Sequence[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[ReviewCluster]:
        audience = self.audience_noun(context)
        total = len(reviews)
        clusters = []

        delighted = [r for r in reviews if _is_delighted(r)]
        if delighted:
            clusters.append(self._build(
                cluster_id="rating-5",
                name=f"Delighted {audience}",
                description=f"{audience} who left a 5-star review",
                members=delighted,
                total=total,
            ))

        dissatisfied = [r for r in reviews if _is_dissatisfied(r)]
        if dissatisfied:
            clusters.append(self._build(
                cluster_id="rating-low",
                name=f"Dissatisfied {audience}",
                description=f"{audience} who left a 1 or 2-star review",
                members=dissatisfied,
                total=total,
            ))

        return clusters

    def cluster_by_theme(
        self,
        reviews: Sequence[Review],
        context: Optional[BusinessContext] = None,
    ) -> List[ReviewCluster]:
        total = len(reviews)
        clusters = []
        for key, label, members, is_specialty in self._theme_groups(reviews, context):
            title = label[:1].upper() + label[1:]
            clusters.append(self._build(
                cluster_id=f"theme-{key.replace(' ', '-')}",
                name=f"{title} {SPECIALTY_SUFFIX}" if is_specialty else f"{title} Theme",
                description=f"Reviews tagged with the theme '{label}'",
                members=members,
                total=total,
            ))
        return clusters

    def cluster_by_sentiment(self, reviews: Sequence[Review]) -> List[ReviewCluster]:
        groups: Dict[SentimentLabel, List[Review]] = {label: [] for label in SENTIMENT_ORDER}
        for review in reviews:
            groups[review.sentiment].append(review)

        total = len(reviews)
        clusters = []
        for label in SENTIMENT_ORDER:
            members = groups[label]
            if not members:
                continue
            clusters.append(self._build(
                cluster_id=f"sentiment-{label.value}",
                name=f"{label.value.capitalize()} Sentiment",
                description=f"Reviews expressing {label.value} sentiment",
                members=members,
                total=total,
                sentiment=label,
            ))
        return clusters

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _theme_groups(self, reviews: Sequence[Review], context: Optional[BusinessContext]):
        """(key, label, members, is_specialty) for every theme that meets its minimum."""
        groups: Dict[str, List[Review]] = OrderedDict()
        labels: Dict[str, str] = {}
        for review in reviews:
            seen = set()
            for tag in review.theme_tags:
                key = _normalize_tag(tag)
                if not key or key in seen:
                    continue
                seen.add(key)
                groups.setdefault(key, []).append(review)
                labels.setdefault(key, tag.strip())

        specialties = set()
        if context is not None:
            specialties = {_normalize_tag(s) for s in context.specialties if s and s.strip()}

        qualifying = []
        for key, members in groups.items():
            is_specialty = key in specialties
            minimum = (
                self.config.min_specialty_theme_reviews if is_specialty
                else self.config.min_theme_reviews
            )
            if len(members) >= minimum:
                qualifying.append((key, labels[key], members, is_specialty))
        return qualifying

    def _build(
        self,
        cluster_id: str,
        name: str,
        description: str,
        members: Sequence[Review],
        total: int,
        sentiment: Optional[SentimentLabel] = None,
    ) -> ReviewCluster:
        average = _mean_rating(members)
        keywords = extract_keywords(members, config=self.keyword_config)
        cluster = ReviewCluster(
            id=cluster_id,
            name=name,
            description=description,
            review_count=len(members),
            average_rating=round(average, 2),
            sentiment=sentiment or rating_sentiment(average),
            keywords=keywords,
            examples=self._examples(members),
            staff=self._staff(members),
        )
        cluster.insights = self._insights(cluster, total)
        return cluster

    def _examples(self, members: Sequence[Review]) -> List[str]:
        examples = []
        for review in members:
            text = (review.text or "").strip()
            if text and text not in examples:
                examples.append(text)
                if len(examples) >= self.config.max_examples:
                    break
        return examples

    def _staff(self, members: Sequence[Review]) -> List[str]:
        """Staff named in at least min_staff_mentions member reviews, most mentioned first."""
        counts: Counter = Counter()
        names: Dict[str, str] = {}
        for review in members:
            for name in review.staff_mentions:
                if len(name) < self.config.min_staff_name_length:
                    continue
                key = name.lower()
                counts[key] += 1
                names.setdefault(key, name)

        ranked = sorted(counts.items(), key=lambda item: -item[1])
        return [
            names[key] for key, count in ranked
            if count >= self.config.min_staff_mentions
        ][:self.config.max_staff]

    def _insights(self, cluster: ReviewCluster, total: int) -> List[str]:
        share = safe_ratio(cluster.review_count, total) * 100
        insights = [
            f"{cluster.review_count} reviews ({share:.0f}% of total) belong to {cluster.name}.",
            f"Average rating in this group is {cluster.average_rating:.1f} stars.",
        ]
        if cluster.keywords:
            terms = ", ".join(cluster.keywords[:self.config.insight_keywords])
            insights.append(f"Most mentioned terms: {terms}.")
        if cluster.staff:
            insights.append(f"Staff most often mentioned: {', '.join(cluster.staff)}.")
        return insights


# =============================================================================
# SIMILARITY
# =============================================================================

def _jaccard(a: set, b: set) -> float:
    return safe_ratio(len(a & b), len(a | b))


def review_similarity(first: Review, second: Review) -> float:
    """
    Similarity in [0, 1].

    Weights: rating closeness 0.3, same sentiment 0.2, theme overlap 0.3,
    text word overlap 0.2.
    """
    score = (1 - abs(first.rating - second.rating) / 4) * 0.3
    if first.sentiment == second.sentiment:
        score += 0.2
    score += _jaccard(
        {_normalize_tag(t) for t in first.theme_tags or ()},
        {_normalize_tag(t) for t in second.theme_tags or ()},
    ) * 0.3
    score += _jaccard(set(tokenize(first.text)), set(tokenize(second.text))) * 0.2
    return round(score, 4)


def find_similar_reviews(target: Review, reviews: Sequence[Review], limit: int = 5) -> List[Review]:
    """Most similar reviews to target, excluding target itself."""
    scored = [
        (review_similarity(target, review), index, review)
        for index, review in enumerate(reviews)
        if review is not target
    ]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [review for _score, _index, review in scored[:limit]]
