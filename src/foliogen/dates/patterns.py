"""Filename and folder-name date detection.

Patterns are tried in a fixed priority order and the first one whose match
survives calendar validation wins. Overlapping encodings (``YYMMDD`` versus
``DDMMYY`` share the same six digits) are disambiguated only by that order and
by the validity check, never by guessing which field looks like a day.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from .models import MONTHS, DateInfo, is_valid_date

Fields = tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class DatePattern:
    """One date encoding the matcher knows about.

    Attributes:
        name: Identifier recorded as ``DateInfo.source``.
        regex: Compiled expression; only the first match is considered.
        parse: Maps the match to ``(year, month, day)``.
        description: Human-readable form of the encoding.
    """

    name: str
    regex: re.Pattern[str]
    parse: Callable[[re.Match[str]], Fields]
    description: str


def _year_first(match: re.Match[str]) -> Fields:
    return int(match[1]), int(match[2]), int(match[3])


def _short_year_first(match: re.Match[str]) -> Fields:
    return 2000 + int(match[1]), int(match[2]), int(match[3])


def _short_year_last(match: re.Match[str]) -> Fields:
    return 2000 + int(match[3]), int(match[2]), int(match[1])


def _year_last(match: re.Match[str]) -> Fields:
    return int(match[3]), int(match[2]), int(match[1])


# Order matters. Digit groups never start inside a longer run of digits.
DATE_PATTERNS: tuple[DatePattern, ...] = (
    DatePattern(
        "yyyymmdd_dash",
        re.compile(r"(?<!\d)(\d{4})[-_](\d{2})[-_](\d{2})"),
        _year_first,
        "YYYY-MM-DD or YYYY_MM_DD",
    ),
    DatePattern(
        "yyyymmdd_solid",
        re.compile(r"(?<!\d)(\d{4})(\d{2})(\d{2})(?!\d)"),
        _year_first,
        "YYYYMMDD",
    ),
    DatePattern(
        "yymmdd_dash",
        re.compile(r"(?<!\d)(\d{2})[-_](\d{2})[-_](\d{2})"),
        _short_year_first,
        "YY-MM-DD or YY_MM_DD",
    ),
    DatePattern(
        "yymmdd_solid",
        re.compile(r"^(\d{2})(\d{2})(\d{2})(?!\d)"),
        _short_year_first,
        "YYMMDD (from start of filename)",
    ),
    DatePattern(
        "ddmmyy_dash",
        re.compile(r"(?<!\d)(\d{2})[-_](\d{2})[-_](\d{2})"),
        _short_year_last,
        "DD-MM-YY or DD_MM_YY",
    ),
    DatePattern(
        "ddmmyy_solid",
        re.compile(r"(?<!\d)(\d{2})(\d{2})(\d{2})(?!\d)"),
        _short_year_last,
        "DDMMYY",
    ),
    DatePattern(
        "ddmmyyyy_dash",
        re.compile(r"(?<!\d)(\d{2})[-_](\d{2})[-_](\d{4})"),
        _year_last,
        "DD-MM-YYYY or DD_MM_YYYY",
    ),
    DatePattern(
        "ddmmyyyy_solid",
        re.compile(r"(?<!\d)(\d{2})(\d{2})(\d{4})(?!\d)"),
        _year_last,
        "DDMMYYYY",
    ),
)

_MONTH_YEAR = re.compile(r"^([A-Za-z]+)\s+(\d{4})$")


def build_date_info(year: int, month: int, day: int, **meta: object) -> DateInfo:
    """Construct a validated DateInfo; raises ``ValueError`` for impossible dates."""
    return DateInfo(year=year, month=month, day=day, **meta)


def detect_date(text: object) -> Optional[DateInfo]:
    """Return the first valid date encoded in ``text``, or None.

    Args:
        text: Filename or folder name. Non-string input yields None.

    Returns:
        Optional[DateInfo]: Date tagged with the matching pattern name.
    """
    if not isinstance(text, str) or not text:
        return None

    for pattern in DATE_PATTERNS:
        match = pattern.regex.search(text)
        if match is None:
            continue
        year, month, day = pattern.parse(match)
        if not is_valid_date(day, month, year):
            continue
        return build_date_info(
            year,
            month,
            day,
            source=pattern.name,
            confidence="high",
            description=pattern.description,
        )
    return None


def detect_date_from_images(names: Iterable[object]) -> Optional[DateInfo]:
    """Return the date of the first name in ``names`` that carries one."""
    for name in names:
        info = detect_date(name)
        if info is not None:
            return info
    return None


def parse_month_year(name: str) -> Optional[DateInfo]:
    """Parse a ``Month Year`` folder name such as ``August 2025`` (day 1)."""
    match = _MONTH_YEAR.match(name.strip())
    if match is None:
        return None
    month_label = match[1].lower()
    for index, month_name in enumerate(MONTHS, start=1):
        if month_name.lower() == month_label:
            year = int(match[2])
            if not is_valid_date(1, index, year):
                return None
            return build_date_info(
                year,
                index,
                1,
                source="folder:month_year",
                confidence="medium",
                display=f"{month_name} {year}",
            )
    return None


def fallback_date(today: date | None = None) -> DateInfo:
    """Return January 1st of the current year, the last-resort collection date."""
    current = today or date.today()
    return build_date_info(
        current.year,
        1,
        1,
        source="fallback",
        confidence="low",
        description="Fallback to current year",
    )


def format_display(info: DateInfo) -> str:
    """Return the display string for ``info`` (its explicit display or ``Month Year``)."""
    return info.display or info.label


__all__ = [
    "DATE_PATTERNS",
    "DatePattern",
    "build_date_info",
    "detect_date",
    "detect_date_from_images",
    "parse_month_year",
    "fallback_date",
    "format_display",
]
