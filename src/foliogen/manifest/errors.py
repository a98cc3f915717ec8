"""Manifest errors."""


class ManifestError(Exception):
    """Base exception for manifest loading and writing."""


class ManifestWriteError(ManifestError):
    """Raised when a manifest file cannot be written."""


class FeaturedError(ManifestError):
    """Raised when no featured items can be selected."""
