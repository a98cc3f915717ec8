"""Ordered rule tables for deriving categories and tags from folder names.

Rules are data: each table is evaluated top to bottom and the first matching
rule wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """Assign ``category`` when ``pattern`` matches a folder name."""

    pattern: re.Pattern[str]
    category: str

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None


@dataclass(frozen=True, slots=True)
class TagRule:
    """Add ``tags`` when any keyword occurs in the lower-cased name."""

    keywords: tuple[str, ...]
    tags: tuple[str, ...]

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        return any(keyword in lowered for keyword in self.keywords)


def _rule(expression: str, category: str) -> CategoryRule:
    return CategoryRule(re.compile(expression, re.IGNORECASE), category)


EVENT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    _rule(r"love.*s.*a.*game|howl.*at.*the.*moon", "Performance Art"),
    _rule(r"hike|hiking|meet\s*hike|outdoor|trail|walk", "General"),
    _rule(
        r"james.*bond.*cocktail|cocktail.*party|inclusivity|workplace|myron.*cope"
        r"|franks.*script|dance.*for.*a.*cause|robotics|denver",
        "Corporate",
    ),
    _rule(r"gala|celebration|festival|wedding|graduation", "Celebration"),
    _rule(r"conference|summit|forum|symposium|local.*union|officers", "Conference"),
    _rule(r"published|press|feature|media|awards", "Published"),
    _rule(r"on-location|location|travel|tour", "On-Location"),
)
EVENT_DEFAULT_CATEGORY = "Corporate"

PORTRAIT_TAG_RULES: tuple[TagRule, ...] = (
    TagRule(("character", "study"), ("character", "black-and-white")),
    TagRule(("environmental", "location"), ("environmental", "location")),
    TagRule(("studio", "headshot"), ("studio", "professional")),
    TagRule(("editorial", "fashion"), ("editorial", "fashion")),
    TagRule(("corporate", "business"), ("corporate", "professional")),
)


def first_category(
    rules: Sequence[CategoryRule], name: str, default: Optional[str] = None
) -> Optional[str]:
    """Return the category of the first rule matching ``name``."""
    for rule in rules:
        if rule.matches(name):
            return rule.category
    return default


def derive_tags(rules: Sequence[TagRule], name: str, base: Iterable[str] = ()) -> list[str]:
    """Return ``base`` followed by the tags of the first rule matching ``name``."""
    tags = list(base)
    for rule in rules:
        if rule.matches(name):
            tags.extend(rule.tags)
            break
    return unique(tags)


def unique(values: Iterable[str]) -> list[str]:
    """Return ``values`` without duplicates, keeping first occurrences."""
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


__all__ = [
    "CategoryRule",
    "TagRule",
    "EVENT_CATEGORY_RULES",
    "EVENT_DEFAULT_CATEGORY",
    "PORTRAIT_TAG_RULES",
    "derive_tags",
    "first_category",
    "unique",
]
