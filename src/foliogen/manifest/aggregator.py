"""Aggregate scanned collections into one manifest per portfolio type."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from foliogen.scanning import Collection

from .models import (
    MANIFEST_MODELS,
    BaseManifest,
    CollectionEntry,
    ConcertEntry,
    EventEntry,
    JournalismEntry,
    ManifestEntry,
    utc_timestamp,
)

ENTRY_MODELS: dict[str, type[ManifestEntry]] = {
    "concert": ConcertEntry,
    "events": EventEntry,
    "journalism": JournalismEntry,
    "nature": CollectionEntry,
    "portrait": CollectionEntry,
}

TOTAL_FIELDS = {
    "bands": "total_bands",
    "events": "total_events",
    "collections": "total_collections",
}


def sort_newest_first(collections: Iterable[Collection]) -> list[Collection]:
    """Return collections ordered by ``date.iso`` descending.

    The sort is stable, so collections sharing a date keep their scan order.
    """
    return sorted(collections, key=lambda collection: collection.date.iso, reverse=True)


def build_entry(portfolio_type: str, collection: Collection) -> ManifestEntry:
    """Convert a scanned collection into the manifest entry for ``portfolio_type``."""
    model = ENTRY_MODELS[portfolio_type]
    values = {
        "name": collection.name,
        "folder_path": collection.folder_path,
        "date_display": collection.date_display,
        "date": collection.date,
        "date_source": collection.date.source,
        "date_confidence": collection.date.confidence,
        "date_notes": collection.date_notes,
        "category": collection.category,
        "tags": list(collection.tags),
        "total_images": collection.total_images,
        "images": list(collection.images),
    }
    if model is JournalismEntry:
        values["published"] = collection.published
        if collection.publication is not None:
            values.update(collection.publication.model_dump(exclude_none=True))
    return model(**values)


def _sorted_unique(values: Iterable[str | None]) -> list[str]:
    return sorted({value for value in values if value})


def _category_counts(entries: Sequence[ManifestEntry]) -> dict[str, int]:
    counts = Counter(entry.category for entry in entries if entry.category)
    return {category: counts[category] for category in sorted(counts)}


def aggregate(
    portfolio_type: str,
    collections: Iterable[Collection],
    *,
    version: str,
    generated: str | None = None,
) -> BaseManifest:
    """Sort collections newest first and wrap them in the type's manifest model.

    Args:
        portfolio_type: One of the registered portfolio types.
        collections: Scanned collections, in scan order.
        version: Manifest version string.
        generated: Timestamp to stamp; defaults to now (UTC).

    Returns:
        BaseManifest: The concrete manifest variant for ``portfolio_type``.

    Raises:
        KeyError: If ``portfolio_type`` is unknown.
    """
    model = MANIFEST_MODELS[portfolio_type]
    entries = [build_entry(portfolio_type, collection) for collection in sort_newest_first(collections)]
    array_field = model.array_field

    values: dict[str, object] = {
        "version": version,
        "generated": generated or utc_timestamp(),
        TOTAL_FIELDS[array_field]: len(entries),
        "total_images": sum(entry.total_images for entry in entries),
        "tags": _sorted_unique(tag for entry in entries for tag in entry.tags),
        array_field: entries,
    }
    if portfolio_type == "events":
        values["categories"] = _sorted_unique(entry.category for entry in entries)
        values["category_counts"] = _category_counts(entries)
    elif portfolio_type == "journalism":
        values["categories"] = _sorted_unique(entry.category for entry in entries)
        values["category_stats"] = _category_counts(entries)
    return model(**values)


__all__ = ["ENTRY_MODELS", "aggregate", "build_entry", "sort_newest_first"]
