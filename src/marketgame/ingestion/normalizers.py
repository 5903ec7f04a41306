"""Field normalizers for spreadsheet-exported text.

The CSV exports are hand-maintained, so formatting drift is expected.
Every ``try_parse_*`` function returns a ``FieldParse`` holding the value
and, when the text could not be read, a ``ParseWarning``. The plain
``parse_*`` functions unwrap to the value, which falls back to ``0`` for
numbers and ``None`` for dates. Nothing in this module raises on bad input.

Numeric parsing reads the leading number of the cleaned text, so
``"12.5 pts"`` reads as ``12.5`` and ``"abc"`` falls back to zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, TypeVar

T = TypeVar("T")

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_PARENTHESIZED = re.compile(r"^\((.+)\)$")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

_FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
)


@dataclass(frozen=True)
class ParseWarning:
    """Describes a field that could not be read and was defaulted."""

    kind: str
    raw: str | None
    reason: str


@dataclass(frozen=True)
class FieldParse(Generic[T]):
    """Outcome of parsing one field."""

    value: T
    warning: ParseWarning | None = None

    @property
    def ok(self) -> bool:
        return self.warning is None


def _leading_float(text: str) -> float | None:
    match = _LEADING_FLOAT.match(text)
    if match is None:
        return None
    return float(match.group(1))


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def try_parse_currency(text: str | None) -> FieldParse[float]:
    """Parse a currency string such as ``$1,234.50``, ``($500)`` or ``-$20``.

    Parenthesized amounts are negative. Unreadable text yields ``0.0``
    with a warning.
    """
    if not text or not text.strip():
        return FieldParse(0.0, ParseWarning("currency", text, "empty"))

    cleaned = text.strip().replace("$", "").replace(",", "")
    cleaned = _PARENTHESIZED.sub(r"-\1", cleaned)

    value = _leading_float(cleaned)
    if value is None:
        return FieldParse(0.0, ParseWarning("currency", text, "not a number"))
    return FieldParse(value)


def try_parse_percent(text: str | None) -> FieldParse[float]:
    """Parse a percent string such as ``+12.34%`` into ``12.34``."""
    if not text or not text.strip():
        return FieldParse(0.0, ParseWarning("percent", text, "empty"))

    cleaned = text.strip().replace("%", "")
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]

    value = _leading_float(cleaned)
    if value is None:
        return FieldParse(0.0, ParseWarning("percent", text, "not a number"))
    return FieldParse(value)


def try_parse_int(text: str | None) -> FieldParse[int]:
    """Parse an integer count such as ``1,204`` or ``25%``."""
    if not text or not text.strip():
        return FieldParse(0, ParseWarning("integer", text, "empty"))

    value = _leading_int(text.replace(",", ""))
    if value is None:
        return FieldParse(0, ParseWarning("integer", text, "not an integer"))
    return FieldParse(value)


def try_parse_number(text: str | None) -> FieldParse[float]:
    """Parse a plain decimal number with optional thousands separators."""
    if not text or not text.strip():
        return FieldParse(0.0, ParseWarning("number", text, "empty"))

    value = _leading_float(text.replace(",", ""))
    if value is None:
        return FieldParse(0.0, ParseWarning("number", text, "not a number"))
    return FieldParse(value)


def try_parse_date(text: str | None) -> FieldParse[date | None]:
    """Parse ``M/D/YY`` or ``M/D/YYYY`` dates with an optional suffix.

    Anything after the first space (``"5/4/25 11:54p ET"``) is ignored.
    Two-digit years are read as ``20YY``. Text that does not split into
    exactly three ``/`` parts falls back to ISO and a few long formats.
    """
    if not text or not text.strip():
        return FieldParse(None, ParseWarning("date", text, "empty"))

    stripped = text.strip()
    parts = stripped.split(" ")[0].split("/")
    if len(parts) == 3:
        month, day, year = (_leading_int(part) for part in parts)
        if month is None or day is None or year is None:
            return FieldParse(None, ParseWarning("date", text, "non-numeric date part"))
        if year < 100:
            year += 2000
        try:
            return FieldParse(date(year, month, day))
        except ValueError:
            return FieldParse(None, ParseWarning("date", text, "date out of range"))

    try:
        return FieldParse(datetime.fromisoformat(stripped).date())
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return FieldParse(datetime.strptime(stripped, fmt).date())
        except ValueError:
            continue
    return FieldParse(None, ParseWarning("date", text, "unrecognised date format"))


def parse_currency(text: str | None) -> float:
    return try_parse_currency(text).value


def parse_percent(text: str | None) -> float:
    return try_parse_percent(text).value


def parse_int(text: str | None) -> int:
    return try_parse_int(text).value


def parse_number(text: str | None) -> float:
    return try_parse_number(text).value


def parse_date(text: str | None) -> date | None:
    return try_parse_date(text).value


def slugify(name: str) -> str:
    """Build a URL-safe key from a display name.

    Lowercases, collapses every run of non-alphanumeric characters into a
    single hyphen and trims hyphens from both ends.

    Examples:
        >>> slugify("Koby Pfonner")
        'koby-pfonner'
        >>> slugify("  A & B!! ")
        'a-b'
    """
    return _NON_ALPHANUMERIC.sub("-", name.lower()).strip("-")
