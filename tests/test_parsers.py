from datetime import date, datetime, timezone

import pandas as pd
import pytest

from inventory_core.parsers import (
    ItemNameNormalizer,
    TimestampParser,
    names_match,
    normalize_name,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  The  Grand\tBar ", "the grand bar"),
        ("Jack Daniel’s", "jack daniel's"),
        ("Jack Daniel‘s", "jack daniel's"),
        ("JACK DANIEL'S", "jack daniel's"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


@pytest.mark.parametrize(
    "raw", ["  Absolut  Vodka 70CL ", "Jack Daniel’s\n1L", "", "   ", "Ümlaut Likör"]
)
def test_normalize_name_is_idempotent(raw):
    once = normalize_name(raw)
    assert normalize_name(once) == once


def test_substring_match_after_normalization():
    assert names_match("The Grand Bar", "grand bar")
    assert names_match("grand bar", "The Grand Bar")
    assert names_match("Jack Daniel’s 1L", "jack daniel's")


def test_equal_names_match():
    assert names_match("Absolut Vodka", "  absolut   VODKA ")


def test_unrelated_names_do_not_match():
    assert not names_match("Absolut Vodka", "Grey Goose")
    # no edit-distance matching
    assert not names_match("Absolut Vodka", "Absolute Vodka 70cl")


@pytest.mark.parametrize("a, b", [("", "x"), ("x", ""), ("", ""), ("   ", "   "), (None, "vodka")])
def test_empty_names_never_match(a, b):
    assert not names_match(a, b)


def test_item_name_normalizer_series():
    normalizer = ItemNameNormalizer()
    series = pd.Series(["  Gin ", "TONIC   Water"])
    assert normalizer.normalize_series(series).tolist() == ["gin", "tonic water"]
    assert normalizer.matches("Gin", "Bombay Sapphire Gin 70cl")


class TestTimestampParser:
    def test_zulu_suffix_converted_to_report_zone(self):
        parser = TimestampParser("Asia/Dubai")
        assert parser.parse("2024-01-01T22:30:00Z") == datetime(2024, 1, 2, 2, 30)

    def test_offset_converted_to_utc(self):
        parser = TimestampParser("UTC")
        assert parser.parse("2024-01-01 10:00:00+04:00") == datetime(2024, 1, 1, 6, 0)

    def test_naive_string_kept_as_is(self):
        assert TimestampParser("UTC").parse("2024-01-01T10:00:00") == datetime(2024, 1, 1, 10)

    def test_datetime_and_date_inputs(self):
        parser = TimestampParser("UTC")
        aware = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        assert parser.parse(aware) == datetime(2024, 3, 1, 12)
        assert parser.parse(date(2024, 3, 1)) == datetime(2024, 3, 1)
        assert parser.parse(pd.Timestamp("2024-03-01 08:00")) == datetime(2024, 3, 1, 8)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "31/02/2024", "2024-02-30T10:00:00", 12345, pd.NaT])
    def test_unparseable_values_are_none(self, value):
        assert TimestampParser("UTC").parse(value) is None

    def test_parse_series(self):
        parsed = TimestampParser("UTC").parse_series(pd.Series(["2024-01-01", "bad"]))
        assert parsed.iloc[0] == datetime(2024, 1, 1)
        assert pd.isna(parsed.iloc[1])

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2024-01-01T10:00:00.12+00:00", datetime(2024, 1, 1, 10, 0, 0, 120000)),
            ("2024-01-01 10:00:00+00", datetime(2024, 1, 1, 10)),
            ("2024-01-01 14:00:00.5+04", datetime(2024, 1, 1, 10, 0, 0, 500000)),
        ],
    )
    def test_postgres_timestamptz_text(self, text, expected):
        assert TimestampParser("UTC").parse(text) == expected

    def test_cache_is_bounded(self):
        parser = TimestampParser("UTC", cache_size=100)
        for minute in range(500):
            parser.parse(f"2024-01-01T{minute // 60:02d}:{minute % 60:02d}:00Z")
        info = parser.cache_info()
        assert info.maxsize == 100
        assert info.currsize == 100

    def test_repeated_strings_hit_the_cache(self):
        parser = TimestampParser("UTC")
        parser.parse("2024-01-01T10:00:00Z")
        parser.parse(" 2024-01-01T10:00:00Z ")
        assert parser.cache_info().hits == 1
