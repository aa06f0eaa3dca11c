"""
Keyword Extractor (Deterministic)
==================================

Derives representative terms from review text by plain frequency counting.
No NLP models: lower-case, whitespace split, stopword and length filter.

Usage:
    keywords = extract_keywords(reviews)            # top 10
    keywords = extract_keywords(reviews, top_n=5)
"""

import logging
import string
from collections import Counter
from typing import Iterable, List, Optional

from .analysis_config import KeywordConfig
from .review_models import Review

logger = logging.getLogger(__name__)

_DEFAULT = KeywordConfig()

# Punctuation stripped from token edges so "coffee," and "coffee" match.
_EDGE_PUNCTUATION = string.punctuation + "“”‘’…"


def tokenize(text: Optional[str], config: KeywordConfig = _DEFAULT) -> List[str]:
    """Return the countable tokens of a text, in order of appearance."""
    if not text:
        return []
    tokens = []
    for raw in text.lower().split():
        token = raw.strip(_EDGE_PUNCTUATION)
        if len(token) < config.min_token_length:
            continue
        if token in config.stopwords:
            continue
        tokens.append(token)
    return tokens


def count_keywords(texts: Iterable[Optional[str]], config: KeywordConfig = _DEFAULT) -> Counter:
    """Token frequencies across texts. Counter keeps first-seen insertion order."""
    counts: Counter = Counter()
    for text in texts:
        counts.update(tokenize(text, config))
    return counts


def top_keywords(counts: Counter, top_n: int) -> List[str]:
    """
    Top terms by descending frequency.

    Ties keep first-seen order: sorted() is stable and Counter iterates in
    insertion order.
    """
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [word for word, _count in ranked[:top_n]]


def extract_keywords(
    reviews: Iterable[Review],
    top_n: Optional[int] = None,
    config: KeywordConfig = _DEFAULT,
) -> List[str]:
    """
    Extract the most frequent meaningful words from a set of reviews.

    Args:
        reviews: Reviews to scan; missing or empty text is skipped.
        top_n: Number of terms to return (defaults to config.top_n).

    Returns:
        Up to top_n words, most frequent first.
    """
    limit = config.top_n if top_n is None else top_n
    counts = count_keywords((r.text for r in reviews), config)
    return top_keywords(counts, limit)
