"""
Review Loader
==============

Ingestion boundary: turns raw rows (JSON exports, database rows) into clean
Review records. Delimited theme and staff strings are split here so the
analyzers only ever see tuples of tags.

Rows without a usable 1-5 rating are dropped with a warning; every other
field is optional.

Usage:
    reviews = load_reviews_from_json("reviews.json")
    reviews = load_reviews_from_db(conn, "Blue Door Cafe")
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .review_models import Review, split_tags

logger = logging.getLogger(__name__)

# Field aliases: original export names first, snake_case second.
_FIELDS = {
    "rating": ("stars", "rating", "star"),
    "text": ("text", "body", "translatedText"),
    "published_at": ("publishedAtDate", "published_at", "review_date", "date"),
    "sentiment_label": ("sentiment", "sentiment_label"),
    "theme_tags": ("mainThemes", "theme_tags", "themes"),
    "staff_mentions": ("staffMentioned", "staff_mentions"),
    "owner_response_text": ("responseFromOwnerText", "owner_response_text"),
    "review_id": ("reviewUrl", "review_id", "id"),
}


def _row_tags(value: Any) -> Tuple[str, ...]:
    # Unexpected column types are dirty data, not caller misuse
    if value is None or not isinstance(value, (str, list, tuple)):
        return ()
    return split_tags(value)


def _pick(row: Mapping[str, Any], field: str) -> Any:
    for key in _FIELDS[field]:
        if row.get(key) is not None:
            return row[key]
    return None


def _parse_rating(value: Any) -> Optional[int]:
    try:
        rating = int(round(float(value)))
    except (TypeError, ValueError):
        return None
    if 1 <= rating <= 5:
        return rating
    return None


def review_from_row(row: Mapping[str, Any]) -> Optional[Review]:
    """Build a Review from one raw row, or None if the row has no valid rating."""
    rating = _parse_rating(_pick(row, "rating"))
    if rating is None:
        return None

    published = _pick(row, "published_at")
    if published is not None and not isinstance(published, (str, date)):
        published = str(published)

    sentiment = _pick(row, "sentiment_label")
    owner_response = _pick(row, "owner_response_text")
    review_id = _pick(row, "review_id")

    return Review(
        rating=rating,
        text=str(_pick(row, "text") or ""),
        published_at=published,
        sentiment_label=str(sentiment) if sentiment is not None else None,
        theme_tags=_row_tags(_pick(row, "theme_tags")),
        staff_mentions=_row_tags(_pick(row, "staff_mentions")),
        owner_response_text=str(owner_response) if owner_response is not None else None,
        review_id=str(review_id) if review_id is not None else None,
    )


def reviews_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[Review]:
    reviews = []
    dropped = 0
    for row in rows:
        review = review_from_row(row) if isinstance(row, Mapping) else None
        if review is None:
            dropped += 1
            continue
        reviews.append(review)

    if dropped:
        logger.warning(f"Dropped {dropped} rows without a valid 1-5 rating")
    return reviews


def load_reviews_from_json(path: Union[str, Path]) -> List[Review]:
    """
    Load reviews from a JSON file.

    Accepts either a top-level list of rows or an object with a "reviews" list.
    """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, Mapping):
        payload = payload.get("reviews", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a list of reviews or an object with a 'reviews' list")

    reviews = reviews_from_rows(payload)
    logger.info(f"Loaded {len(reviews)} reviews from {path}")
    return reviews


def load_reviews_from_db(conn, business_name: str, limit: int = 5000) -> List[Review]:
    """Load one business's reviews from the reviews table (psycopg2 connection)."""
    with conn.cursor() as cur:
        cur.execute("""
            SELECT review_url, stars, text, published_at, sentiment,
                   main_themes, staff_mentioned, response_from_owner_text
            FROM reviews
            WHERE business_name = %s
            ORDER BY published_at DESC NULLS LAST
            LIMIT %s
        """, (business_name, limit))
        rows = cur.fetchall()

    reviews = reviews_from_rows(
        {
            "review_id": r[0],
            "rating": r[1],
            "text": r[2],
            "published_at": r[3],
            "sentiment_label": r[4],
            "theme_tags": r[5],
            "staff_mentions": r[6],
            "owner_response_text": r[7],
        }
        for r in rows
    )
    logger.info(f"Loaded {len(reviews)} reviews for {business_name}")
    return reviews
