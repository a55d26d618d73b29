"""Tests for the order catalog."""

from datetime import date

import pytest
from pydantic import ValidationError

from order_support.schemas.order_schema import OrderStatus
from order_support.tools.orders import get_all_orders, get_order, match_order, order_option_labels


class TestCatalog:
    def test_three_orders(self):
        assert [o.id for o in get_all_orders()] == ["A", "B", "C"]

    def test_status_categories(self):
        assert get_order("A").status == OrderStatus.IN_TRANSIT
        assert get_order("B").status == OrderStatus.PROCESSING
        assert get_order("C").status == OrderStatus.DELIVERED

    def test_status_metadata(self):
        assert get_order("A").estimated_delivery == date(2024, 7, 25)
        assert get_order("C").delivered_on == date(2024, 7, 20)
        assert get_order("C").estimated_delivery is None

    def test_lookup_is_case_insensitive(self):
        assert get_order("b").id == "B"

    def test_unknown_order(self):
        assert get_order("Z") is None

    def test_option_labels(self):
        assert order_option_labels() == ["Order A", "Order B", "Order C"]

    def test_orders_are_immutable(self):
        with pytest.raises(ValidationError):
            get_order("A").product = "Something else"


class TestMatchOrder:
    @pytest.mark.parametrize("text,expected", [
        ("Order A", "A"),
        ("order b", "B"),
        ("  ORDER    C  ", "C"),
        ("c", "C"),
        ("orderA", "A"),
        ("I'd like to manage order b", "B"),
    ])
    def test_matches(self, text, expected):
        assert match_order(text).id == expected

    @pytest.mark.parametrize("text", ["", "Order D", "the blue one", "track"])
    def test_no_match(self, text):
        assert match_order(text) is None

    def test_bare_letter_inside_word_ignored(self):
        assert match_order("cab") is None

    def test_catalog_order_breaks_ties(self):
        assert match_order("b or c").id == "B"
