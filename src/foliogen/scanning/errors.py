"""Scanning errors."""


class ScanError(Exception):
    """Raised when a portfolio root cannot be scanned at all."""
