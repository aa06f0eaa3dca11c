"""
Tests for the review ingestion boundary (rows, JSON files, database).

Usage:
    pytest tests/test_review_loader.py -v
"""

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from src.reviews.review_loader import (
    load_reviews_from_db,
    load_reviews_from_json,
    review_from_row,
    reviews_from_rows,
)
from src.reviews.review_models import Review, split_tags


class TestSplitTags:

    def test_comma_and_semicolon(self):
        assert split_tags("Coffee; service, coffee ,") == ("Coffee", "service")

    def test_list_input(self):
        assert split_tags(["  latte  art", None, "Latte Art"]) == ("latte art",)

    def test_missing(self):
        assert split_tags(None) == ()
        assert split_tags("") == ()

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            split_tags(42)


class TestReviewTags:

    def test_string_tags_are_split_not_iterated(self):
        review = Review(rating=5, theme_tags="coffee", staff_mentions="Ana; Tom")
        assert review.theme_tags == ("coffee",)
        assert review.staff_mentions == ("Ana", "Tom")

    def test_list_tags_become_tuples(self):
        review = Review(rating=5, theme_tags=["coffee", " Coffee ", "view"])
        assert review.theme_tags == ("coffee", "view")

    def test_none_tags_are_empty(self):
        assert Review(rating=3, theme_tags=None).theme_tags == ()

    def test_non_string_tags_raise(self):
        with pytest.raises(TypeError):
            Review(rating=3, theme_tags=7)


class TestReviewFromRow:

    def test_export_field_names(self):
        review = review_from_row({
            "stars": 5,
            "text": "Best flat white in town",
            "publishedAtDate": "2024-05-01T09:30:00.000Z",
            "sentiment": "positive",
            "mainThemes": "coffee, staff",
            "staffMentioned": "Ana;Tom",
            "responseFromOwnerText": "Thanks Ana!",
            "reviewUrl": "https://example.com/r/1",
        })
        assert review.rating == 5
        assert review.theme_tags == ("coffee", "staff")
        assert review.staff_mentions == ("Ana", "Tom")
        assert review.has_owner_response
        assert review.published_date.month == 5
        assert review.review_id == "https://example.com/r/1"

    def test_snake_case_field_names(self):
        review = review_from_row({"rating": "4", "theme_tags": ["view"], "published_at": datetime(2024, 1, 2)})
        assert review.rating == 4
        assert review.text == ""
        assert review.theme_tags == ("view",)
        assert review.published_date == datetime(2024, 1, 2)

    def test_unexpected_tag_column_is_ignored(self):
        review = review_from_row({"stars": 4, "mainThemes": {"coffee": 1}})
        assert review.theme_tags == ()

    def test_rating_is_rounded(self):
        assert review_from_row({"stars": 4.6}).rating == 5

    @pytest.mark.parametrize("rating", [None, 0, 6, "abc"])
    def test_invalid_rating_drops_row(self, rating):
        assert review_from_row({"stars": rating, "text": "hello"}) is None

    def test_rows_without_rating_are_dropped(self):
        reviews = reviews_from_rows([{"stars": 5}, {"text": "no rating"}, "not a row", {"stars": 1}])
        assert [r.rating for r in reviews] == [5, 1]


class TestLoadFromJson:

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "reviews.json"
        path.write_text(json.dumps([{"stars": 5, "text": "great"}, {"stars": 2}]), encoding="utf-8")
        assert len(load_reviews_from_json(path)) == 2

    def test_object_with_reviews_key(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"reviews": [{"rating": 3}]}), encoding="utf-8")
        assert [r.rating for r in load_reviews_from_json(str(path))] == [3]

    def test_unexpected_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps("nope"), encoding="utf-8")
        with pytest.raises(ValueError):
            load_reviews_from_json(path)


class TestLoadFromDb:

    def test_rows_are_mapped(self):
        conn = MagicMock()
        cur = conn.cursor.return_value.__enter__.return_value
        cur.fetchall.return_value = [
            ("url-1", 5, "Lovely", datetime(2024, 3, 1, 10), "positive", "coffee;cake", None, "Thanks"),
            ("url-2", None, "Broken row", None, None, None, None, None),
        ]

        reviews = load_reviews_from_db(conn, "Blue Door Cafe", limit=10)

        assert len(reviews) == 1
        assert reviews[0].review_id == "url-1"
        assert reviews[0].theme_tags == ("coffee", "cake")
        assert reviews[0].has_owner_response
        sql, params = cur.execute.call_args[0]
        assert "FROM reviews" in sql
        assert params == ("Blue Door Cafe", 10)
