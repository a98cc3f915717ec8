"""EXIF timestamp extraction backed by Pillow."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .models import DateInfo, is_valid_date

LOGGER = logging.getLogger(__name__)

TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003
EXIF_IFD = 0x8769

# Tried in order; ``DateTime`` comes first to match the existing manifests.
_CANDIDATES = (
    ("exif", TAG_DATETIME),
    ("exif_original", TAG_DATETIME_ORIGINAL),
)


def _parse_timestamp(value: object) -> Optional[tuple[int, int, int]]:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    stamp = value.strip().strip("\x00")
    parts = stamp[:10].split(":")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError:
        return None
    return year, month, day


def read_exif_date(path: Path) -> Optional[DateInfo]:
    """Return the capture date stored in the EXIF block of ``path``.

    Args:
        path: Image file to inspect.

    Returns:
        Optional[DateInfo]: Date sourced from ``exif`` or ``exif_original``, or None
        when the file has no usable timestamp or cannot be read.
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            values = {TAG_DATETIME: exif.get(TAG_DATETIME)}
            values[TAG_DATETIME_ORIGINAL] = exif.get_ifd(EXIF_IFD).get(TAG_DATETIME_ORIGINAL)
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        LOGGER.debug("Could not read EXIF from %s: %s", path.name, exc)
        return None

    for source, tag in _CANDIDATES:
        parsed = _parse_timestamp(values.get(tag))
        if parsed is None:
            continue
        year, month, day = parsed
        if not is_valid_date(day, month, year):
            continue
        return DateInfo(year=year, month=month, day=day, source=source, confidence="high")
    return None


__all__ = ["read_exif_date"]
