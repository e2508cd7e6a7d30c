"""Tests for command line value parsing."""
from datetime import datetime, timezone

import pytest

from kafkascope.exceptions import InvalidArgumentError
from kafkascope.utils.parsing import parse_delimiter, parse_headers, parse_time


class TestParseTime:

    def test_utc(self):
        assert parse_time("01-03-2024 12:30:00") == datetime(2024, 3, 1, 12, 30, 0, tzinfo=timezone.utc)

    def test_custom_format(self):
        assert parse_time("2024-03-01", "%Y-%m-%d") == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(InvalidArgumentError, match="does not match format"):
            parse_time("2024-03-01 12:30")


class TestParseDelimiter:

    @pytest.mark.parametrize("value,expected", [
        ("|", "|"),
        (",", ","),
        ("\\t", "\t"),
        ("\\n", "\n"),
        ("\n", "\n"),
    ])
    def test_valid(self, value, expected):
        assert parse_delimiter(value) == expected

    @pytest.mark.parametrize("value", ["", "||", "é"])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_delimiter(value)


class TestParseHeaders:

    def test_pairs(self):
        assert parse_headers("source=cli, trace = abc") == {"source": "cli", "trace": "abc"}

    def test_empty_value(self):
        assert parse_headers("flag=") == {"flag": ""}

    def test_none(self):
        assert parse_headers(None) == {}

    @pytest.mark.parametrize("value", ["source", "=cli", "a=1,b"])
    def test_malformed(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_headers(value)
