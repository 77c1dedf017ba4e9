"""
Parsers for the free-text names and timestamps found in venue data.

These parsers handle the messy reality of hospitality data:
- Movement and POS records reference items by free-text name, not by key
- Names differ in case, spacing and apostrophe style between systems
- Timestamps arrive as ISO strings with and without offsets
"""

from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo
import re

import pandas as pd

from . import settings


# Curly quotes, backtick, acute accent and prime all fold to a plain apostrophe
_APOSTROPHES = re.compile(r"[’‘`´′']")
_WHITESPACE = re.compile(r"\s+")
_ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_name(name: str | None) -> str:
    """Lowercase, trim, collapse whitespace and fold apostrophe variants."""
    if name is None or (isinstance(name, float) and pd.isna(name)):
        return ""
    result = str(name).lower().strip()
    result = _WHITESPACE.sub(" ", result)
    return _APOSTROPHES.sub("'", result)


def names_match(a: str | None, b: str | None) -> bool:
    """
    Loose name match: equal after normalization, or one contains the other.

    Empty names never match anything, including each other.
    """
    na = normalize_name(a)
    nb = normalize_name(b)
    if not na or not nb:
        return False
    return na == nb or na in nb or nb in na


class ItemNameNormalizer:
    """
    Normalizes item names so catalog entries can be matched to movement and
    POS records that only carry a name.

    Handles:
    - Case normalization
    - Extra whitespace
    - Apostrophe variants (Jack Daniel's vs Jack Daniel’s)
    """

    def normalize(self, name: str | None) -> str:
        return normalize_name(name)

    def matches(self, a: str | None, b: str | None) -> bool:
        return names_match(a, b)

    def normalize_series(self, series: pd.Series) -> pd.Series:
        """Normalize an entire pandas Series of item names."""
        return series.apply(self.normalize)


class TimestampParser:
    """
    Parses record timestamps into naive datetimes in a single report zone.

    The store emits ISO-8601 strings ("2024-01-01T21:15:00Z",
    "2024-01-01 21:15:00+04:00") and Postgres timestamptz text with trimmed
    fractions and short offsets ("2024-01-01 21:15:00.12+04"). Exports and
    hand-built fixtures also carry plain dates and datetime objects.
    Anything unparseable becomes None.
    """

    def __init__(self, timezone: str | None = None, cache_size: int = 4096):
        """
        Args:
            timezone: IANA zone aware timestamps are converted to (defaults to settings)
            cache_size: Most distinct strings remembered between calls
        """
        self.zone = ZoneInfo(timezone or settings.REPORT_TIMEZONE)
        # Bounded so a long-running refresh loop doesn't grow it forever
        self._parse_text = lru_cache(maxsize=cache_size)(self._parse_text_uncached)

    def parse(self, value) -> datetime | None:
        """Parse a single timestamp value."""
        # NaT subclasses datetime, so rule it out first
        if value is None or value is pd.NaT:
            return None
        if isinstance(value, pd.Timestamp):
            value = value.to_pydatetime()
        if isinstance(value, datetime):
            return self._to_report_zone(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if not isinstance(value, str):
            return None

        text = value.strip()
        if not text:
            return None
        return self._parse_text(text)

    def cache_info(self):
        return self._parse_text.cache_info()

    def _parse_text_uncached(self, text: str) -> datetime | None:
        # fromisoformat only accepts a trailing Z from 3.11 on
        if text.endswith(("Z", "z")):
            text_iso = text[:-1] + "+00:00"
        else:
            text_iso = text

        try:
            return self._to_report_zone(datetime.fromisoformat(text_iso))
        except ValueError:
            pass

        # Before 3.11, fromisoformat rejects 2-digit fractions and "+HH" offsets
        if not _ISO_DATE_PREFIX.match(text):
            return None
        try:
            parsed = pd.Timestamp(text)
        except ValueError:
            return None
        if parsed is pd.NaT:
            return None
        return self._to_report_zone(parsed.to_pydatetime())

    def parse_series(self, series: pd.Series) -> pd.Series:
        """Parse an entire pandas Series of timestamps."""
        return series.apply(self.parse)

    def _to_report_zone(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        return value.astimezone(self.zone).replace(tzinfo=None)
