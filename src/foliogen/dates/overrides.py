"""Manual date overrides keyed by folder path or collection name."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from .models import DateInfo, extract_date_fields

LOGGER = logging.getLogger(__name__)


class OverrideCache:
    """Holds the parsed override file for the lifetime of a resolver.

    The cache is never invalidated automatically; call :meth:`clear` (tests do)
    to force a reload.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] | None = dict(entries) if entries is not None else None

    @property
    def loaded(self) -> bool:
        """Return True once entries are available."""
        return self._entries is not None

    def get(self) -> dict[str, Any] | None:
        """Return cached entries, or None when nothing was loaded yet."""
        return self._entries

    def set(self, entries: Mapping[str, Any]) -> None:
        """Store parsed entries."""
        self._entries = dict(entries)

    def clear(self) -> None:
        """Forget cached entries."""
        self._entries = None


@dataclass(slots=True)
class ResolvedOverride:
    """A validated override ready to replace an inferred date.

    Attributes:
        date: Normalized date carrying override provenance.
        date_display: Human label for the date.
        date_source: Provenance label, ``manual:override`` unless the entry says otherwise.
        date_confidence: Confidence label, ``high`` unless the entry says otherwise.
        notes: Optional notes authored alongside the override.
        key: Candidate key that matched.
    """

    date: DateInfo
    date_display: str
    date_source: str
    date_confidence: str
    notes: Optional[str]
    key: str


def normalize_key(key: str) -> str:
    """Return ``key`` with backslash separators turned into forward slashes."""
    return re.sub(r"\\+", "/", key)


def format_override(raw: Any, key: str = "") -> Optional[ResolvedOverride]:
    """Turn a raw override entry into a :class:`ResolvedOverride`.

    Returns None when the entry is not a mapping or its date does not validate.
    """
    if not isinstance(raw, Mapping):
        return None
    fields = extract_date_fields(raw)
    if fields is None:
        return None

    year, month, day = fields
    notes = raw.get("notes") or raw.get("note")
    source = raw.get("dateSource") or raw.get("source") or "manual:override"
    confidence = raw.get("dateConfidence") or raw.get("confidence") or "high"
    try:
        info = DateInfo(
            year=year,
            month=month,
            day=day,
            source=str(source),
            confidence=str(confidence),
            description=raw.get("description") or notes,
            notes=notes,
        )
    except ValidationError:
        return None
    display = raw.get("dateDisplay") or raw.get("display") or info.label
    info.display = str(display)
    return ResolvedOverride(
        date=info,
        date_display=str(display),
        date_source=info.source,
        date_confidence=info.confidence,
        notes=notes,
        key=key,
    )


class OverrideResolver:
    """Look up manual date corrections from a single JSON file."""

    def __init__(self, path: Path | None, cache: OverrideCache | None = None) -> None:
        """Initialize the resolver.

        Args:
            path: Override file location; None disables overrides.
            cache: Cache object to use; a private one is created when omitted.
        """
        self._path = path
        self._cache = cache if cache is not None else OverrideCache()

    @property
    def cache(self) -> OverrideCache:
        """Return the cache backing this resolver."""
        return self._cache

    def load(self) -> dict[str, Any]:
        """Return override entries, reading the file on first use only."""
        cached = self._cache.get()
        if cached is not None:
            return cached

        entries: dict[str, Any] = {}
        if self._path is not None and self._path.exists():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                LOGGER.warning("Ignoring unreadable override file %s: %s", self._path, exc)
            else:
                if isinstance(data, dict):
                    entries = data
                else:
                    LOGGER.warning("Override file %s must contain a JSON object.", self._path)
        self._cache.set(entries)
        return entries

    def resolve(self, candidate_keys: Iterable[str | None]) -> Optional[ResolvedOverride]:
        """Return the first valid override among ``candidate_keys``.

        Args:
            candidate_keys: Keys in priority order (folder path, name, raw folder...).

        Returns:
            Optional[ResolvedOverride]: Matching override, or None.
        """
        entries = self.load()
        if not entries:
            return None

        for key in candidate_keys:
            if not key:
                continue
            normalized = normalize_key(key)
            raw = entries.get(normalized)
            if raw is None:
                raw = entries.get(key)
            if raw is None:
                continue
            resolved = format_override(raw, key=normalized)
            if resolved is not None:
                return resolved
            LOGGER.warning("Override for %r has an invalid date; ignoring it.", normalized)
        return None

    @staticmethod
    def apply(inferred: DateInfo, override: ResolvedOverride) -> DateInfo:
        """Return ``inferred`` with the override's date and provenance laid over it."""
        replacement = override.date
        return inferred.model_copy(
            update={
                "year": replacement.year,
                "month": replacement.month,
                "day": replacement.day,
                "month_name": replacement.month_name,
                "iso": replacement.iso,
                "source": override.date_source,
                "confidence": override.date_confidence,
                "display": override.date_display,
                "description": replacement.description or inferred.description,
                "notes": override.notes,
            }
        )


__all__ = [
    "OverrideCache",
    "OverrideResolver",
    "ResolvedOverride",
    "format_override",
    "normalize_key",
]
