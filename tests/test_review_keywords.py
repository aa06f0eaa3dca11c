"""
Tests for the deterministic keyword extractor.

Usage:
    pytest tests/test_review_keywords.py -v
"""

from src.reviews.analysis_config import KeywordConfig
from src.reviews.review_keywords import count_keywords, extract_keywords, tokenize, top_keywords
from src.reviews.review_models import Review


def make_review(text: str, rating: int = 4) -> Review:
    return Review(rating=rating, text=text)


class TestTokenize:

    def test_lowercases_and_drops_short_tokens(self):
        assert tokenize("The Coffee was GREAT") == ["coffee", "great"]

    def test_drops_stopwords_of_length_four(self):
        assert tokenize("this place with that view") == ["place", "view"]

    def test_strips_edge_punctuation(self):
        assert tokenize("Coffee, coffee! (coffee)") == ["coffee", "coffee", "coffee"]

    def test_empty_and_missing_text(self):
        assert tokenize("") == []
        assert tokenize(None) == []

    def test_custom_config(self):
        config = KeywordConfig(min_token_length=2, stopwords=frozenset({"tea"}))
        assert tokenize("tea is ok", config) == ["is", "ok"]


class TestExtractKeywords:

    def test_descending_frequency(self):
        reviews = [
            make_review("friendly staff, great coffee"),
            make_review("great coffee again"),
            make_review("coffee was cold"),
        ]
        assert extract_keywords(reviews)[:2] == ["coffee", "great"]

    def test_ties_keep_first_seen_order(self):
        reviews = [make_review("latte scone"), make_review("scone latte")]
        assert extract_keywords(reviews) == ["latte", "scone"]
        assert extract_keywords(reviews, top_n=1) == ["latte"]

    def test_default_limit_is_ten(self):
        words = " ".join(f"word{i:02d}" for i in range(15))
        assert len(extract_keywords([make_review(words)])) == 10

    def test_tolerates_missing_text(self):
        assert extract_keywords([Review(rating=3), make_review("")]) == []

    def test_top_keywords_on_counter(self):
        counts = count_keywords(["pastry pastry bread", None, "bread pastry"])
        assert top_keywords(counts, 5) == ["pastry", "bread"]
