"""Structural checks for manifest files already on disk."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import MANIFEST_MODELS

LOGGER = logging.getLogger(__name__)

_ARRAY_FIELDS = ("bands", "events", "collections", "items", "images")
_TOTAL_FIELDS = {
    "bands": "totalBands",
    "events": "totalEvents",
    "collections": "totalCollections",
    "items": "totalItems",
}


@dataclass(frozen=True)
class ValidationIssue:
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationReport:
    """Files inspected by :func:`validate_tree` and the problems found."""

    root: Path
    checked: list[Path] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def is_manifest_file(path: Path) -> bool:
    return path.is_file() and (path.name == "manifest.json" or path.name.endswith("-manifest.json"))


def validate_tree(root: Path) -> ValidationReport:
    """Check every manifest file below ``root``.

    Args:
        root: Directory to walk.

    Returns:
        ValidationReport: Checked files and any issues.
    """
    report = ValidationReport(root=root)
    for path in sorted(root.rglob("*manifest.json")):
        if not is_manifest_file(path):
            continue
        report.checked.append(path)
        for message in check_manifest(path):
            report.issues.append(ValidationIssue(path, message))
    LOGGER.debug("Checked %d manifest files under %s.", len(report.checked), root)
    return report


def check_manifest(path: Path) -> list[str]:
    """Return the problems found in one manifest file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        return [f"failed to parse: {exc}"]
    if not isinstance(data, dict):
        return ["top-level value is not an object"]

    problems: list[str] = []
    for name in _ARRAY_FIELDS:
        if name in data and not isinstance(data[name], list):
            problems.append(f"{name} is not an array")
    if "totalImages" in data and not _is_number(data["totalImages"]):
        problems.append("totalImages is not a number")
    if data.get("type") in MANIFEST_MODELS or data.get("type") == "featured":
        problems.extend(_check_aggregate(data))
    return problems


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_aggregate(data: dict[str, Any]) -> list[str]:
    problems: list[str] = []
    for array_field, total_field in _TOTAL_FIELDS.items():
        entries = data.get(array_field)
        if not isinstance(entries, list):
            continue
        if total_field in data and data[total_field] != len(entries):
            problems.append(f"{total_field} is {data[total_field]} but {array_field} has {len(entries)}")

        previous: str | None = None
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                problems.append(f"{array_field}[{index}] is not an object")
                continue
            images = entry.get("images")
            if isinstance(images, list) and entry.get("totalImages") != len(images):
                problems.append(f"{array_field}[{index}].totalImages does not match its images")
            stored_date = entry.get("date")
            iso = stored_date.get("iso") if isinstance(stored_date, dict) else None
            if isinstance(iso, str):
                if previous is not None and iso > previous:
                    problems.append(f"{array_field}[{index}] is newer than the entry before it")
                previous = iso
    return problems


__all__ = ["ValidationIssue", "ValidationReport", "check_manifest", "is_manifest_file", "validate_tree"]
