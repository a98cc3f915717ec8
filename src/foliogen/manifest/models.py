"""Manifest data models.

Each portfolio type has its own manifest model with a named array field
(``bands``, ``events`` or ``collections``); together they form the
:data:`PortfolioManifest` tagged union keyed by ``type``. Loading existing
files is lenient only inside the entry validators below.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Type, Union

from pydantic import Field, TypeAdapter, field_validator, model_validator

from foliogen.dates import DateInfo, coerce_date
from foliogen.models import CamelModel

_LEGACY_DATE_KEYS = ("concertDate", "eventDate", "dateISO")


def utc_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    current = now or datetime.now(timezone.utc)
    return current.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _image_name(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in ("path", "filename", "src"):
            candidate = value.get(key)
            if isinstance(candidate, str) and candidate:
                return candidate
    return None


class ManifestEntry(CamelModel):
    """One collection as stored in an aggregate manifest."""

    name: str
    folder_path: str = ""
    date_display: str = ""
    date: Optional[DateInfo] = None
    date_source: Optional[str] = None
    date_confidence: Optional[str] = None
    date_notes: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    total_images: int = 0
    images: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("date") is None:
            for key in _LEGACY_DATE_KEYS:
                if data.get(key):
                    data["date"] = data[key]
                    break
        if "totalImages" not in data and "total_images" not in data:
            images = data.get("images")
            data["totalImages"] = len(images) if isinstance(images, list) else 0
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Any:
        if value is None or isinstance(value, DateInfo):
            return value
        return coerce_date(value, source="manifest")

    @field_validator("images", mode="before")
    @classmethod
    def _image_strings(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [name for name in (_image_name(item) for item in value) if name]


class ConcertEntry(ManifestEntry):
    name: str = Field(alias="bandName")


class EventEntry(ManifestEntry):
    name: str = Field(alias="eventName")


class JournalismEntry(EventEntry):
    """Journalism story, optionally flagged as published work."""

    published: Optional[bool] = None
    outlet: Optional[str] = None
    outlet_url: Optional[str] = None
    article_url: Optional[str] = None
    article_title: Optional[str] = None
    published_date: Optional[str] = None


class CollectionEntry(ManifestEntry):
    name: str = Field(alias="collectionName")


class BaseManifest(CamelModel):
    """Fields shared by every aggregate manifest."""

    array_field: ClassVar[str] = ""
    entry_model: ClassVar[Type[ManifestEntry]] = ManifestEntry

    type: str
    version: str = ""
    generated: str = ""

    def entries(self) -> List[ManifestEntry]:
        """Return the type-specific array of entries."""
        return getattr(self, self.array_field)


class ConcertManifest(BaseManifest):
    array_field: ClassVar[str] = "bands"
    entry_model: ClassVar[Type[ManifestEntry]] = ConcertEntry

    type: Literal["concert"] = "concert"
    total_bands: int = 0
    total_images: int = 0
    tags: List[str] = Field(default_factory=list)
    bands: List[ConcertEntry] = Field(default_factory=list)


class EventsManifest(BaseManifest):
    array_field: ClassVar[str] = "events"
    entry_model: ClassVar[Type[ManifestEntry]] = EventEntry

    type: Literal["events"] = "events"
    total_events: int = 0
    total_images: int = 0
    categories: List[str] = Field(default_factory=list)
    category_counts: Dict[str, int] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    events: List[EventEntry] = Field(default_factory=list)


class JournalismManifest(BaseManifest):
    array_field: ClassVar[str] = "events"
    entry_model: ClassVar[Type[ManifestEntry]] = JournalismEntry

    type: Literal["journalism"] = "journalism"
    total_events: int = 0
    total_images: int = 0
    categories: List[str] = Field(default_factory=list)
    category_stats: Dict[str, int] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    events: List[JournalismEntry] = Field(default_factory=list)


class NatureManifest(BaseManifest):
    array_field: ClassVar[str] = "collections"
    entry_model: ClassVar[Type[ManifestEntry]] = CollectionEntry

    type: Literal["nature"] = "nature"
    total_collections: int = 0
    total_images: int = 0
    tags: List[str] = Field(default_factory=list)
    collections: List[CollectionEntry] = Field(default_factory=list)


class PortraitManifest(BaseManifest):
    array_field: ClassVar[str] = "collections"
    entry_model: ClassVar[Type[ManifestEntry]] = CollectionEntry

    type: Literal["portrait"] = "portrait"
    total_collections: int = 0
    total_images: int = 0
    tags: List[str] = Field(default_factory=list)
    collections: List[CollectionEntry] = Field(default_factory=list)


PortfolioManifest = Annotated[
    Union[ConcertManifest, EventsManifest, JournalismManifest, NatureManifest, PortraitManifest],
    Field(discriminator="type"),
]

MANIFEST_MODELS: Dict[str, type[BaseManifest]] = {
    "concert": ConcertManifest,
    "events": EventsManifest,
    "journalism": JournalismManifest,
    "nature": NatureManifest,
    "portrait": PortraitManifest,
}

_MANIFEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(PortfolioManifest)


def load_manifest(data: Any, portfolio_type: str | None = None) -> BaseManifest:
    """Validate raw JSON data into the matching manifest model.

    Args:
        data: Parsed JSON document.
        portfolio_type: Type assumed when the document predates the ``type`` field.

    Raises:
        pydantic.ValidationError: If the document does not describe a manifest.
    """
    if isinstance(data, dict) and "type" not in data and portfolio_type is not None:
        data = {**data, "type": portfolio_type}
    return _MANIFEST_ADAPTER.validate_python(data)


class DateRange(CamelModel):
    newest: Optional[str] = None
    oldest: Optional[str] = None


class FeaturedConfig(CamelModel):
    items_per_category: int
    total_limit: int


class FeaturedItem(CamelModel):
    """A manifest entry normalized for the featured widget."""

    id: str
    name: str
    title: str
    type: str
    category: str
    folder_path: str = ""
    date: DateInfo
    date_display: str = ""
    cover_image: Optional[str] = None
    total_images: int = 0
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class FeaturedManifest(CamelModel):
    """Cross-portfolio selection of the newest collections."""

    type: Literal["featured"] = "featured"
    version: str
    generated: str
    sources: List[str] = Field(default_factory=list)
    total_items: int = 0
    total_images: int = 0
    categories: List[str] = Field(default_factory=list)
    portfolio_types: List[str] = Field(default_factory=list)
    date_range: DateRange = Field(default_factory=DateRange)
    config: FeaturedConfig
    items: List[FeaturedItem] = Field(default_factory=list)


__all__ = [
    "BaseManifest",
    "CollectionEntry",
    "ConcertEntry",
    "ConcertManifest",
    "DateRange",
    "EventEntry",
    "EventsManifest",
    "FeaturedConfig",
    "FeaturedItem",
    "FeaturedManifest",
    "JournalismEntry",
    "JournalismManifest",
    "MANIFEST_MODELS",
    "ManifestEntry",
    "NatureManifest",
    "PortfolioManifest",
    "PortraitManifest",
    "load_manifest",
    "utc_timestamp",
]
