"""Shape descriptors: how each portfolio type is laid out on disk."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional

from .rules import (
    EVENT_CATEGORY_RULES,
    EVENT_DEFAULT_CATEGORY,
    PORTRAIT_TAG_RULES,
    CategoryRule,
    TagRule,
    first_category,
)

PortfolioType = Literal["concert", "events", "journalism", "nature", "portrait"]


@dataclass(frozen=True, slots=True)
class Section:
    """Part of a category-shaped portfolio holding leaf collections.

    Attributes:
        path: Folder relative to the portfolio root ("" for the root itself).
        grouped: Leaves sit one level deeper, inside group folders whose
            lower-cased name becomes a tag (``Wildlife/Birds/Heron``).
        tags: Tags added to every leaf in the section.
    """

    path: str
    grouped: bool = False
    tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ShapeDescriptor:
    """Everything the generic scanner needs to know about one portfolio type.

    Attributes:
        portfolio_type: Identifier used in CLI arguments and file names.
        directory: Folder name below the portfolios root.
        kind: ``flat`` (entity folders) or ``category`` (category/leaf folders).
        base_tags: Tags applied to every collection.
        subfolder_naming: Flat shape only; ``entity`` names subfolder
            collections after their entity (bands), ``subfolder`` after the
            subfolder itself (stories).
        entity_is_category: Flat shape only; the entity folder is the category.
        direct_suffix: Appended to the entity title for loose-image collections.
        title_names: Title-case folder names for display.
        category_rules: Ordered rules deriving a category from the folder name.
        default_category: Category used when no rule matches.
        tag_rules: Ordered rules deriving extra tags from the collection name.
        sections: Category shape only; where leaf collections live.
        recursive_images: Collect images from nested folders of a leaf.
        infer_dates: Attempt date inference (otherwise the fallback year is used).
        read_sidecar: Read optional ``tags.json`` metadata from collection folders.
    """

    portfolio_type: PortfolioType
    directory: str
    kind: Literal["flat", "category"]
    base_tags: tuple[str, ...] = ()
    subfolder_naming: Literal["entity", "subfolder"] = "entity"
    entity_is_category: bool = False
    direct_suffix: str = ""
    title_names: bool = False
    category_rules: tuple[CategoryRule, ...] = ()
    default_category: Optional[str] = None
    tag_rules: tuple[TagRule, ...] = ()
    sections: tuple[Section, ...] = ()
    recursive_images: bool = False
    infer_dates: bool = True
    read_sidecar: bool = False

    @property
    def manifest_name(self) -> str:
        """Return the aggregate manifest filename, e.g. ``concert-manifest.json``."""
        return f"{self.portfolio_type}-manifest.json"

    def display_name(self, folder_name: str) -> str:
        """Return the collection name for ``folder_name``."""
        return title_case(folder_name) if self.title_names else folder_name

    def category_for(self, folder_name: str) -> Optional[str]:
        """Return the category derived from ``folder_name`` via the rule table."""
        return first_category(self.category_rules, folder_name, self.default_category)


def title_case(name: str) -> str:
    """Turn ``love-is-a_game`` into ``Love Is A Game``."""
    words = re.sub(r"[-_]+", " ", name).split()
    return " ".join(word[0].upper() + word[1:] for word in words)


PORTFOLIO_SHAPES: dict[str, ShapeDescriptor] = {
    "concert": ShapeDescriptor(
        portfolio_type="concert",
        directory="Concert",
        kind="flat",
        base_tags=("concert",),
        subfolder_naming="entity",
    ),
    "events": ShapeDescriptor(
        portfolio_type="events",
        directory="Events",
        kind="flat",
        base_tags=("event",),
        title_names=True,
        category_rules=EVENT_CATEGORY_RULES,
        default_category=EVENT_DEFAULT_CATEGORY,
        read_sidecar=True,
    ),
    "journalism": ShapeDescriptor(
        portfolio_type="journalism",
        directory="Journalism",
        kind="flat",
        subfolder_naming="subfolder",
        entity_is_category=True,
        direct_suffix=" Portfolio",
        title_names=True,
        read_sidecar=True,
    ),
    "nature": ShapeDescriptor(
        portfolio_type="nature",
        directory="Nature",
        kind="category",
        sections=(
            Section("Wildlife", grouped=True),
            Section("Landscapes", tags=("landscape",)),
        ),
    ),
    "portrait": ShapeDescriptor(
        portfolio_type="portrait",
        directory="Portrait",
        kind="category",
        base_tags=("portrait",),
        tag_rules=PORTRAIT_TAG_RULES,
        sections=(Section(""),),
        recursive_images=True,
        infer_dates=False,
    ),
}

PORTFOLIO_TYPES: tuple[str, ...] = tuple(PORTFOLIO_SHAPES)


def get_shape(portfolio_type: str) -> ShapeDescriptor:
    """Return the descriptor registered for ``portfolio_type``.

    Raises:
        KeyError: If the type is unknown.
    """
    return PORTFOLIO_SHAPES[portfolio_type]


__all__ = [
    "PORTFOLIO_SHAPES",
    "PORTFOLIO_TYPES",
    "PortfolioType",
    "Section",
    "ShapeDescriptor",
    "get_shape",
    "title_case",
]
