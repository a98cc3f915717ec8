"""Date data models shared by the matcher, the override resolver and manifests."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping, Optional

from pydantic import model_validator

from foliogen.models import CamelModel

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MIN_YEAR = 1990
MAX_YEAR = 2030

# Plain dates, or full timestamps as older manifests stored them.
_ISO = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)


def is_calendar_date(day: int, month: int, year: int) -> bool:
    """Return True when ``year-month-day`` names a real calendar day."""
    try:
        built = date(year, month, day)
    except (TypeError, ValueError):
        return False
    return (built.year, built.month, built.day) == (year, month, day)


def is_valid_date(day: int, month: int, year: int) -> bool:
    """Return True for real calendar days inside the accepted year range."""
    if year < MIN_YEAR or year > MAX_YEAR:
        return False
    return is_calendar_date(day, month, year)


class DateInfo(CamelModel):
    """An inferred calendar date and where it came from.

    Attributes:
        year: Four-digit year.
        month: Month number (1-12).
        day: Day of month.
        month_name: English month name derived from ``month``.
        iso: ``YYYY-MM-DD`` rendering derived from the fields above.
        source: Pattern name or provenance label (``fallback``, ``manual:override``...).
        confidence: ``high``, ``medium`` or ``low``.
        display: Optional human label such as ``August 2025``.
        description: Optional description of the matching rule.
        notes: Optional free-form notes carried over from overrides.
    """

    year: int
    month: int
    day: int
    month_name: str = ""
    iso: str = ""
    source: str = "fallback"
    confidence: str = "high"
    display: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _derive_fields(self) -> "DateInfo":
        if not is_calendar_date(self.day, self.month, self.year):
            raise ValueError(f"{self.year}-{self.month}-{self.day} is not a calendar date")
        self.month_name = MONTHS[self.month - 1]
        self.iso = f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        return self

    @property
    def label(self) -> str:
        """Return the ``Month Year`` label used for display strings."""
        return f"{self.month_name} {self.year}"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def extract_date_fields(raw: Mapping[str, Any]) -> Optional[tuple[int, int, int]]:
    """Return ``(year, month, day)`` from a stored date mapping, or None.

    ``dateISO``/``iso`` strings win over explicit ``year``/``month``/``day``
    fields; a missing day defaults to 1. Dates outside the accepted range or
    calendar are rejected.
    """
    iso = raw.get("dateISO") or raw.get("iso")
    if isinstance(iso, str):
        match = _ISO.match(iso.strip())
        if match:
            year, month, day = int(match[1]), int(match[2]), int(match[3])
            if is_valid_date(day, month, year):
                return year, month, day

    year = _as_int(raw.get("year"))
    month = _as_int(raw.get("month"))
    day = _as_int(raw.get("day")) if raw.get("day") is not None else 1
    if year is None or month is None or day is None:
        return None
    if not is_valid_date(day, month, year):
        return None
    return year, month, day


def coerce_date(value: Any, *, source: str, confidence: str = "high") -> Optional[DateInfo]:
    """Build a DateInfo from a previously serialized date, or return None.

    Args:
        value: ISO string or mapping as found in existing manifests.
        source: Provenance used when ``value`` does not carry one.
        confidence: Confidence used when ``value`` does not carry one.
    """
    if isinstance(value, DateInfo):
        return value
    if isinstance(value, str):
        value = {"iso": value}
    if not isinstance(value, Mapping):
        return None
    fields = extract_date_fields(value)
    if fields is None:
        return None
    year, month, day = fields
    display = value.get("display")
    return DateInfo(
        year=year,
        month=month,
        day=day,
        source=str(value.get("source") or source),
        confidence=str(value.get("confidence") or confidence),
        display=display if isinstance(display, str) else None,
    )


__all__ = [
    "MONTHS",
    "MIN_YEAR",
    "MAX_YEAR",
    "DateInfo",
    "coerce_date",
    "extract_date_fields",
    "is_calendar_date",
    "is_valid_date",
]
