"""
Unit tests for query-parameter validation.
"""

from decimal import Decimal

import pytest

from app.params import (
    PRODUCT_SORT_FIELDS,
    FilterSet,
    parse_filters,
    parse_int,
    parse_pagination,
    parse_sort,
)


class TestParsePagination:
    """page / limit parsing and clamping."""

    def test_defaults_when_absent(self):
        p = parse_pagination(None, None, 50, 1000)
        assert (p.page, p.limit, p.offset) == (1, 50, 0)

    @pytest.mark.parametrize("raw", ["0", "-3", "abc", "", "2.5", "1_0", "\u0663"])
    def test_bad_page_falls_back_to_one(self, raw):
        assert parse_pagination(raw, None, 50, 1000).page == 1

    def test_large_page_is_kept(self):
        p = parse_pagination("100000", "10", 50, 1000)
        assert p.page == 100000
        assert p.offset == 999990

    def test_limit_is_clamped_to_max(self):
        assert parse_pagination("1", "5000", 50, 1000).limit == 1000

    def test_limit_at_max_is_kept(self):
        assert parse_pagination("1", "1000", 50, 1000).limit == 1000

    @pytest.mark.parametrize("raw", ["abc", "0", "-5", ""])
    def test_unusable_limit_uses_default(self, raw):
        assert parse_pagination("1", raw, 50, 1000).limit == 50

    def test_default_limit_is_also_clamped(self):
        assert parse_pagination(None, None, 50, 20).limit == 20

    def test_offset(self):
        p = parse_pagination("3", "25", 50, 1000)
        assert p.offset == 50


class TestParseInt:
    """Strict ASCII integer grammar."""

    @pytest.mark.parametrize("raw,expected", [("7", 7), (" 12 ", 12), ("+5", 5), ("-3", -3), ("007", 7)])
    def test_plain_integers(self, raw, expected):
        assert parse_int(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "1_0", "0_2", "1e3", "\u0663", "\uff11\uff12", "12abc", "--1"])
    def test_everything_else_is_rejected(self, raw):
        assert parse_int(raw) is None


class TestParseSort:
    """Allow-list enforcement and direction normalisation."""

    @pytest.mark.parametrize("field", PRODUCT_SORT_FIELDS)
    def test_allowed_fields_pass(self, field):
        assert parse_sort(field, None, PRODUCT_SORT_FIELDS, "id").field == field

    @pytest.mark.parametrize(
        "field", ["nombre", "PRICE", "price; DROP TABLE productos", "", None]
    )
    def test_unknown_field_uses_default(self, field):
        assert parse_sort(field, "desc", PRODUCT_SORT_FIELDS, "id").field == "id"

    @pytest.mark.parametrize("raw", ["desc", "DESC", "DeSc"])
    def test_desc_any_case(self, raw):
        assert parse_sort("price", raw, PRODUCT_SORT_FIELDS, "id").direction == "DESC"

    @pytest.mark.parametrize("raw", [None, "", "asc", "descending", "down", " desc"])
    def test_everything_else_is_asc(self, raw):
        assert parse_sort("price", raw, PRODUCT_SORT_FIELDS, "id").direction == "ASC"


class TestParseFilters:
    """Optional filters; unusable values mean no constraint."""

    def test_no_filters(self):
        assert parse_filters() == FilterSet()

    def test_all_filters(self):
        f = parse_filters("Hogar", "10.5", "99", "silla")
        assert f.category == "Hogar"
        assert f.price_min == Decimal("10.5")
        assert f.price_max == Decimal("99")
        assert f.search == "silla"

    def test_empty_strings_are_ignored(self):
        assert parse_filters("", "", "", "") == FilterSet()

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", "1,5"])
    def test_unparseable_prices_are_ignored(self, raw):
        f = parse_filters(price_min=raw, price_max=raw)
        assert f.price_min is None
        assert f.price_max is None

    def test_zero_price_min_is_a_constraint(self):
        assert parse_filters(price_min="0").price_min == Decimal("0")
