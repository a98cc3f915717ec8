"""Cross-portfolio featured selection.

Per-type manifests are read as-is from disk, normalized into
:class:`~foliogen.manifest.models.FeaturedItem` objects at a single seam
(:func:`normalize_manifest`), and the newest items of each type are merged
into one featured manifest.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError

from foliogen.dates import DateInfo, detect_date_from_images, fallback_date, format_display

from .errors import FeaturedError, ManifestError
from .models import (
    BaseManifest,
    DateRange,
    FeaturedConfig,
    FeaturedItem,
    FeaturedManifest,
    MANIFEST_MODELS,
    ManifestEntry,
    load_manifest,
    utc_timestamp,
)

LOGGER = logging.getLogger(__name__)

DISPLAY_NAMES = {
    "concert": "Concert",
    "events": "Events",
    "journalism": "Journalism",
    "nature": "Nature",
    "portrait": "Portrait",
}

CATEGORY_TAGS = {
    "Concert": ("Live Music", "Concert", "Performance"),
    "Events": ("Event", "Corporate", "Professional"),
    "Journalism": ("Documentary", "Journalism", "Story"),
}


def manifest_path(base: Path, portfolio_type: str) -> Path:
    """Return ``<base>/<Type>/<type>-manifest.json``."""
    return base / DISPLAY_NAMES[portfolio_type] / f"{portfolio_type}-manifest.json"


def _with_category_tags(tags: Iterable[str], display_type: str) -> list[str]:
    merged = list(tags)
    existing = {tag.lower() for tag in merged}
    for tag in CATEGORY_TAGS.get(display_type, ()):
        if tag.lower() not in existing:
            merged.append(tag)
            existing.add(tag.lower())
    return merged


def _item_date(name: str, images: list[str], stored: Optional[DateInfo], today: date | None) -> DateInfo:
    if stored is not None:
        return stored
    detected = detect_date_from_images(images)
    if detected is not None:
        LOGGER.debug("Detected date for %r from images: %s", name, detected.iso)
        return detected
    fallback = fallback_date(today)
    LOGGER.warning("No date found for %r, using fallback %s.", name, fallback.iso)
    return fallback


def normalize_manifest(
    portfolio_type: str, manifest: BaseManifest, today: date | None = None
) -> list[FeaturedItem]:
    """Map every entry of ``manifest`` onto the common featured item shape."""
    display_type = DISPLAY_NAMES[portfolio_type]
    items: list[FeaturedItem] = []
    for entry in manifest.entries():
        info = _item_date(entry.name, entry.images, entry.date, today)
        display = entry.date_display if entry.date is not None else ""
        items.append(
            FeaturedItem(
                id=f"{portfolio_type}:{entry.folder_path or entry.name}",
                name=entry.name,
                title=entry.name,
                type=display_type,
                category=f"{display_type} Photography",
                folder_path=entry.folder_path,
                date=info,
                date_display=display or format_display(info),
                cover_image=entry.images[0] if entry.images else None,
                total_images=entry.total_images or len(entry.images),
                images=list(entry.images),
                tags=_with_category_tags(entry.tags, display_type),
            )
        )
    return items


def _newest_first(items: Iterable[FeaturedItem]) -> list[FeaturedItem]:
    return sorted(items, key=lambda item: item.date.iso, reverse=True)


def select_featured(
    per_type: Mapping[str, BaseManifest],
    items_per_category: int,
    total_limit: int,
    *,
    version: str,
    generated: str | None = None,
    today: date | None = None,
) -> FeaturedManifest:
    """Pick the newest ``items_per_category`` items of each type, capped at ``total_limit``.

    Args:
        per_type: Loaded manifests keyed by portfolio type, in source order.
        items_per_category: Maximum items taken from any single type.
        total_limit: Maximum items in the featured manifest.
        version: Featured manifest version.
        generated: Timestamp to stamp; defaults to now (UTC).
        today: Reference day for fallback dates.

    Raises:
        FeaturedError: If no source manifest contributes any item.
    """
    selected: list[FeaturedItem] = []
    sources: list[str] = []
    for portfolio_type, manifest in per_type.items():
        group = normalize_manifest(portfolio_type, manifest, today=today)
        if not group:
            LOGGER.info("No items in %s manifest.", portfolio_type)
            continue
        sources.append(f"{portfolio_type}-manifest.json")
        top = _newest_first(group)[: max(0, items_per_category)]
        LOGGER.info("Selected %d of %d %s items.", len(top), len(group), portfolio_type)
        selected.extend(top)

    items = _newest_first(selected)[: max(0, total_limit)]
    if not items:
        raise FeaturedError("No portfolio items available to feature.")

    isos = [item.date.iso for item in items]
    return FeaturedManifest(
        version=version,
        generated=generated or utc_timestamp(),
        sources=sources,
        total_items=len(items),
        total_images=sum(item.total_images for item in items),
        categories=sorted({item.category for item in items}),
        portfolio_types=sorted({item.type for item in items}),
        date_range=DateRange(newest=max(isos), oldest=min(isos)),
        config=FeaturedConfig(items_per_category=items_per_category, total_limit=total_limit),
        items=items,
    )


def _load_source(data: object, portfolio_type: str, path: Path) -> BaseManifest:
    """Validate a source manifest entry by entry, dropping entries that fail."""
    if not isinstance(data, dict):
        return load_manifest(data, portfolio_type)
    model = MANIFEST_MODELS.get(str(data.get("type") or portfolio_type))
    raw_entries = data.get(model.array_field, []) if model is not None else None
    if model is None or not isinstance(raw_entries, list):
        return load_manifest(data, portfolio_type)

    envelope = load_manifest({**data, model.array_field: []}, portfolio_type)
    entries: list[ManifestEntry] = []
    for index, raw in enumerate(raw_entries):
        try:
            entries.append(model.entry_model.model_validate(raw))
        except ValidationError as exc:
            LOGGER.warning("Skipping invalid %s entry %d in %s: %s", portfolio_type, index, path, exc)
    return envelope.model_copy(update={model.array_field: entries})


def load_portfolio_manifests(base: Path, sources: Iterable[str]) -> dict[str, BaseManifest]:
    """Read the per-type manifests named in ``sources`` from ``base``.

    Missing files are skipped with a warning, as are individual entries that
    do not validate.

    Raises:
        ManifestError: If a manifest exists but cannot be parsed.
    """
    loaded: dict[str, BaseManifest] = {}
    for portfolio_type in sources:
        path = manifest_path(base, portfolio_type)
        if not path.exists():
            LOGGER.warning("%s manifest not found: %s", DISPLAY_NAMES[portfolio_type], path)
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            loaded[portfolio_type] = _load_source(data, portfolio_type, path)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise ManifestError(f"Failed to read {path}: {exc}") from exc
    return loaded


__all__ = [
    "CATEGORY_TAGS",
    "DISPLAY_NAMES",
    "load_portfolio_manifests",
    "manifest_path",
    "normalize_manifest",
    "select_featured",
]
