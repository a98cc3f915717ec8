"""Manifest models, aggregation, persistence and featured selection."""

from .aggregator import aggregate, build_entry, sort_newest_first
from .errors import FeaturedError, ManifestError, ManifestWriteError
from .featured import (
    DISPLAY_NAMES,
    load_portfolio_manifests,
    manifest_path,
    normalize_manifest,
    select_featured,
)
from .models import (
    MANIFEST_MODELS,
    BaseManifest,
    ConcertManifest,
    EventsManifest,
    FeaturedItem,
    FeaturedManifest,
    JournalismManifest,
    NatureManifest,
    PortfolioManifest,
    PortraitManifest,
    load_manifest,
    utc_timestamp,
)
from .validation import ValidationIssue, ValidationReport, validate_tree
from .writer import ManifestWriter, WriteResult

__all__ = [
    "BaseManifest",
    "ConcertManifest",
    "DISPLAY_NAMES",
    "EventsManifest",
    "FeaturedError",
    "FeaturedItem",
    "FeaturedManifest",
    "JournalismManifest",
    "MANIFEST_MODELS",
    "ManifestError",
    "ManifestWriteError",
    "ManifestWriter",
    "NatureManifest",
    "PortfolioManifest",
    "PortraitManifest",
    "ValidationIssue",
    "ValidationReport",
    "WriteResult",
    "aggregate",
    "build_entry",
    "load_manifest",
    "load_portfolio_manifests",
    "manifest_path",
    "normalize_manifest",
    "select_featured",
    "sort_newest_first",
    "utc_timestamp",
    "validate_tree",
]
