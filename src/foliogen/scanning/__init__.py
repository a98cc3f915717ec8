"""Portfolio discovery: listing rules, shape descriptors and the collection scanner."""

from .discovery import IMAGE_EXTENSIONS, is_image, list_images, list_subdirectories
from .errors import ScanError
from .models import Collection, Publication, ScanResult, Sidecar
from .rules import (
    EVENT_CATEGORY_RULES,
    PORTRAIT_TAG_RULES,
    CategoryRule,
    TagRule,
    derive_tags,
    first_category,
)
from .scanner import CollectionScanner
from .shapes import PORTFOLIO_SHAPES, PORTFOLIO_TYPES, Section, ShapeDescriptor, get_shape

__all__ = [
    "CategoryRule",
    "Collection",
    "CollectionScanner",
    "EVENT_CATEGORY_RULES",
    "IMAGE_EXTENSIONS",
    "PORTFOLIO_SHAPES",
    "PORTFOLIO_TYPES",
    "PORTRAIT_TAG_RULES",
    "Publication",
    "ScanError",
    "ScanResult",
    "Section",
    "ShapeDescriptor",
    "Sidecar",
    "TagRule",
    "derive_tags",
    "first_category",
    "get_shape",
    "is_image",
    "list_images",
    "list_subdirectories",
]
