"""
Tests for display formatting helpers
"""

import pytest
from utils.streamlit_helpers import format_currency, format_date, truncate


class TestFormatCurrency:

    @pytest.mark.parametrize("amount,expected", [
        (1999.99, "$1,999.99"),
        (0, "$0.00"),
        (None, "$0.00"),
        (9.5, "$9.50"),
        (-12.5, "-$12.50"),
    ])
    def test_dollars(self, amount, expected):
        assert format_currency(amount, "$") == expected

    def test_custom_symbol(self):
        assert format_currency(10, "€") == "€10.00"


class TestFormatDate:

    def test_iso_timestamp(self):
        assert format_date("2024-03-05T14:30:00+00:00", "%b %d, %Y") == "Mar 05, 2024"

    def test_zulu_and_naive(self):
        assert format_date("2024-03-05T14:30:00Z", "%Y-%m-%d") == "2024-03-05"
        assert format_date("2024-03-05T14:30:00", "%Y-%m-%d") == "2024-03-05"

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12345])
    def test_unreadable_values(self, value):
        assert format_date(value, "%Y") == ""


class TestTruncate:

    def test_short_text_unchanged(self):
        assert truncate("Lamp", 10) == "Lamp"

    def test_long_text_shortened(self):
        result = truncate("a" * 50, 10)

        assert len(result) == 10
        assert result.endswith("…")

    def test_empty(self):
        assert truncate(None) == ""
