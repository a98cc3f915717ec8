"""Date inference: filename patterns, EXIF tags and manual overrides."""

from .exif import read_exif_date
from .models import MONTHS, DateInfo, coerce_date, is_calendar_date, is_valid_date
from .overrides import (
    OverrideCache,
    OverrideResolver,
    ResolvedOverride,
    format_override,
    normalize_key,
)
from .patterns import (
    DATE_PATTERNS,
    DatePattern,
    build_date_info,
    detect_date,
    detect_date_from_images,
    fallback_date,
    format_display,
    parse_month_year,
)

__all__ = [
    "DATE_PATTERNS",
    "DatePattern",
    "DateInfo",
    "MONTHS",
    "OverrideCache",
    "OverrideResolver",
    "ResolvedOverride",
    "build_date_info",
    "coerce_date",
    "detect_date",
    "detect_date_from_images",
    "fallback_date",
    "format_override",
    "format_display",
    "is_calendar_date",
    "is_valid_date",
    "normalize_key",
    "parse_month_year",
    "read_exif_date",
]
