"""Data models produced by the collection scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from foliogen.dates import DateInfo
from foliogen.models import CamelModel


class Publication(CamelModel):
    """Where a journalism story was published."""

    outlet: str
    outlet_url: Optional[str] = None
    article_url: Optional[str] = None
    article_title: Optional[str] = None
    published_date: Optional[str] = None


class Sidecar(CamelModel):
    """Optional ``tags.json`` metadata stored next to a collection's images."""

    tags: List[str] = Field(default_factory=list)
    published: bool = False
    date: Optional[str] = None
    description: Optional[str] = None
    outlet: Optional[str] = None
    outlet_url: Optional[str] = None
    article_url: Optional[str] = None
    article_title: Optional[str] = None
    published_date: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value if value is not None else []

    def publication(self) -> Optional[Publication]:
        """Return publication details when an outlet is named."""
        if not self.outlet:
            return None
        return Publication(
            outlet=self.outlet,
            outlet_url=self.outlet_url,
            article_url=self.article_url,
            article_title=self.article_title,
            published_date=self.published_date,
        )


class Collection(BaseModel):
    """One folder's worth of images with a single resolved date.

    Attributes:
        name: Display name (band, event, story, species or series).
        folder_path: Path relative to the portfolio root, forward slashes.
        date: Resolved date including provenance.
        date_display: Human label for ``date``.
        images: Image names or relative paths, sorted lexically.
        tags: Ordered, de-duplicated tags.
        category: Optional category label.
        date_notes: Notes carried over from a manual override.
        published: Journalism stories flagged as published work.
        publication: Publication details from the sidecar.
        directory: Folder on disk; never serialized.
    """

    name: str
    folder_path: str
    date: DateInfo
    date_display: str
    images: List[str]
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    date_notes: Optional[str] = None
    published: Optional[bool] = None
    publication: Optional[Publication] = None
    directory: Optional[Path] = Field(default=None, exclude=True)

    @field_validator("images")
    @classmethod
    def _sorted_non_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("a collection needs at least one image")
        return sorted(value)

    @property
    def total_images(self) -> int:
        """Return the number of images in the collection."""
        return len(self.images)


@dataclass
class ScanResult:
    """Outcome of scanning one portfolio root."""

    root: Path
    collections: list[Collection] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


__all__ = ["Collection", "Publication", "ScanResult", "Sidecar"]
