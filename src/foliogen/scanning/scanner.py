"""Generic collection scanner driven by shape descriptors."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from foliogen.dates import (
    DateInfo,
    OverrideResolver,
    coerce_date,
    detect_date,
    detect_date_from_images,
    fallback_date,
    format_display,
    parse_month_year,
    read_exif_date,
)

from .discovery import list_images, list_subdirectories
from .errors import ScanError
from .models import Collection, ScanResult, Sidecar
from .rules import derive_tags, unique
from .shapes import Section, ShapeDescriptor

LOGGER = logging.getLogger(__name__)

SIDECAR_NAME = "tags.json"
FOLDER_MANIFEST_NAME = "manifest.json"
PUBLISHED_TAG = "Published Work"
_STORED_DATE_KEYS = ("date", "concertDate", "eventDate")


class CollectionScanner:
    """Walk a portfolio root and build one :class:`Collection` per image folder."""

    def __init__(
        self,
        descriptor: ShapeDescriptor,
        overrides: OverrideResolver,
        *,
        portfolios_base: Path | None = None,
        sample_size: int = 3,
        use_exif: bool = True,
        today: date | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            descriptor: Layout of the portfolio type being scanned.
            overrides: Resolver consulted for every collection's date.
            portfolios_base: Directory holding all portfolio roots; used to
                build the portfolio-relative override key.
            sample_size: Number of images inspected for a date in entity folders.
            use_exif: Fall back to EXIF timestamps when filenames carry no date.
            today: Reference day for fallback dates.
        """
        self.descriptor = descriptor
        self.overrides = overrides
        self.portfolios_base = portfolios_base
        self.sample_size = max(1, sample_size)
        self.use_exif = use_exif
        self.today = today
        self._relative_root = ""

    def scan(self, root: Path) -> ScanResult:
        """Scan ``root`` and return the collections found beneath it.

        Raises:
            ScanError: If the root directory is missing or unreadable.
        """
        root = root.expanduser()
        if not root.is_dir():
            raise ScanError(f"Portfolio root not found: {root}")

        result = ScanResult(root=root)
        self._relative_root = self._relative_root_for(root)
        try:
            if self.descriptor.kind == "flat":
                self._scan_flat(root, result)
            else:
                self._scan_sections(root, result)
        except OSError as exc:
            raise ScanError(f"Could not read portfolio root {root}: {exc}") from exc
        return result

    # Flat entity shape -------------------------------------------------

    def _scan_flat(self, root: Path, result: ScanResult) -> None:
        for entity_dir in list_subdirectories(root):
            try:
                self._scan_entity(entity_dir, result)
            except OSError as exc:
                self._warn(result, f"Skipping {entity_dir.name}: {exc}")

    def _scan_entity(self, entity_dir: Path, result: ScanResult) -> None:
        shape = self.descriptor
        entity_title = shape.display_name(entity_dir.name)
        category = entity_dir.name if shape.entity_is_category else shape.category_for(entity_dir.name)

        images = list_images(entity_dir)
        if images:
            sidecar = self._read_sidecar(entity_dir, result)
            inferred = self._direct_date(entity_dir, images, sidecar, result)
            self._add(
                result,
                name=entity_title + shape.direct_suffix,
                folder_path=entity_dir.name,
                raw_name=entity_dir.name,
                directory=entity_dir,
                images=images,
                inferred=inferred,
                category=category,
                sidecar=sidecar,
            )

        for subfolder in list_subdirectories(entity_dir):
            try:
                self._scan_subfolder(entity_dir, subfolder, entity_title, category, result)
            except OSError as exc:
                self._warn(result, f"Skipping {entity_dir.name}/{subfolder.name}: {exc}")

    def _scan_subfolder(
        self,
        entity_dir: Path,
        subfolder: Path,
        entity_title: str,
        category: Optional[str],
        result: ScanResult,
    ) -> None:
        folder_path = f"{entity_dir.name}/{subfolder.name}"
        images = list_images(subfolder)
        if not images:
            result.skipped.append(folder_path)
            LOGGER.debug("No images in %s; skipping.", folder_path)
            return

        sidecar = self._read_sidecar(subfolder, result)
        inferred = self._subfolder_date(subfolder, images, sidecar, folder_path, result)
        if self.descriptor.subfolder_naming == "subfolder":
            name = self.descriptor.display_name(subfolder.name)
        else:
            name = entity_title
        self._add(
            result,
            name=name,
            folder_path=folder_path,
            raw_name=subfolder.name,
            directory=subfolder,
            images=images,
            inferred=inferred,
            category=category,
            sidecar=sidecar,
        )

    def _direct_date(
        self,
        entity_dir: Path,
        images: list[str],
        sidecar: Optional[Sidecar],
        result: ScanResult,
    ) -> DateInfo:
        info = self._sidecar_date(sidecar)
        if info is None:
            info = self._sample_date(entity_dir, images[: self.sample_size])
        if info is None:
            folder_date = detect_date(entity_dir.name)
            if folder_date is not None:
                info = folder_date.model_copy(update={"confidence": "medium"})
        if info is None:
            info = parse_month_year(entity_dir.name)
        if info is None:
            info = self._fallback(entity_dir.name, result)
        return info

    def _subfolder_date(
        self,
        subfolder: Path,
        images: list[str],
        sidecar: Optional[Sidecar],
        folder_path: str,
        result: ScanResult,
    ) -> DateInfo:
        info = self._sidecar_date(sidecar)
        if info is None:
            info = self._stored_date(subfolder)
        if info is None:
            info = parse_month_year(subfolder.name)
        if info is None:
            info = detect_date_from_images(images)
        if info is None and self.use_exif:
            info = self._exif_date(subfolder, images[: self.sample_size])
        if info is None:
            info = self._fallback(folder_path, result)
        return info

    # Category / leaf shape ---------------------------------------------

    def _scan_sections(self, root: Path, result: ScanResult) -> None:
        for section in self.descriptor.sections:
            section_dir = root / section.path if section.path else root
            if not section_dir.is_dir():
                LOGGER.debug("Section %s not present under %s.", section.path, root)
                continue
            if not section.grouped:
                self._scan_leaves_safely(root, section_dir, section, result)
                continue
            try:
                groups = list_subdirectories(section_dir)
            except OSError as exc:
                self._warn(result, f"Skipping section {section.path or root.name}: {exc}")
                continue
            for group_dir in groups:
                self._scan_leaves_safely(root, group_dir, section, result, group=group_dir.name)

    def _scan_leaves_safely(
        self,
        root: Path,
        parent: Path,
        section: Section,
        result: ScanResult,
        *,
        group: Optional[str] = None,
    ) -> None:
        try:
            self._scan_leaves(root, parent, section, result, group=group)
        except OSError as exc:
            label = parent.relative_to(root).as_posix() or root.name
            self._warn(result, f"Skipping {label}: {exc}")

    def _scan_leaves(
        self,
        root: Path,
        parent: Path,
        section: Section,
        result: ScanResult,
        *,
        group: Optional[str] = None,
    ) -> None:
        for leaf_dir in list_subdirectories(parent):
            folder_path = leaf_dir.relative_to(root).as_posix()
            try:
                images = list_images(leaf_dir, recursive=self.descriptor.recursive_images)
                if not images:
                    result.skipped.append(folder_path)
                    LOGGER.debug("No images in %s; skipping.", folder_path)
                    continue
                extra_tags = list(section.tags)
                if group:
                    extra_tags.append(group.lower())
                self._add(
                    result,
                    name=leaf_dir.name,
                    folder_path=folder_path,
                    raw_name=leaf_dir.name,
                    directory=leaf_dir,
                    images=images,
                    inferred=self._leaf_date(leaf_dir, images, folder_path, result),
                    category=group or section.path or None,
                    extra_tags=extra_tags,
                )
            except OSError as exc:
                self._warn(result, f"Skipping {folder_path}: {exc}")

    def _leaf_date(
        self, leaf_dir: Path, images: list[str], folder_path: str, result: ScanResult
    ) -> DateInfo:
        if not self.descriptor.infer_dates:
            return fallback_date(self.today)
        info = detect_date_from_images(images)
        if info is None and self.use_exif:
            info = self._exif_date(leaf_dir, images[: self.sample_size])
        if info is None:
            info = self._fallback(folder_path, result)
        return info

    # Shared helpers ----------------------------------------------------

    def _add(
        self,
        result: ScanResult,
        *,
        name: str,
        folder_path: str,
        raw_name: str,
        directory: Path,
        images: list[str],
        inferred: DateInfo,
        category: Optional[str],
        sidecar: Optional[Sidecar] = None,
        extra_tags: Iterable[str] = (),
    ) -> None:
        info = inferred
        notes: Optional[str] = None
        override = self.overrides.resolve(self._override_keys(folder_path, name, raw_name))
        if override is not None:
            LOGGER.debug("Override %s applied to %s.", override.key, folder_path)
            info = self.overrides.apply(inferred, override)
            notes = override.notes

        tags = list(self.descriptor.base_tags)
        if self.descriptor.entity_is_category and category:
            tags.append(category)
        tags.extend(extra_tags)
        published: Optional[bool] = None
        publication = None
        if sidecar is not None:
            tags.extend(sidecar.tags)
            published = sidecar.published or PUBLISHED_TAG in sidecar.tags
            publication = sidecar.publication()
        if published:
            tags.append(PUBLISHED_TAG)
        if self.descriptor.tag_rules:
            tags = derive_tags(self.descriptor.tag_rules, name, base=tags)

        result.collections.append(
            Collection(
                name=name,
                folder_path=folder_path,
                date=info,
                date_display=format_display(info),
                images=images,
                tags=unique(tags),
                category=category,
                date_notes=notes,
                published=published,
                publication=publication,
                directory=directory,
            )
        )

    def _override_keys(self, folder_path: str, name: str, raw_name: str) -> list[str]:
        keys = []
        if self._relative_root:
            keys.append(f"{self._relative_root}/{folder_path}")
        keys.extend([folder_path, name, raw_name])
        return keys

    def _relative_root_for(self, root: Path) -> str:
        if self.portfolios_base is None:
            return ""
        try:
            relative = root.resolve().relative_to(self.portfolios_base.expanduser().resolve())
        except ValueError:
            return ""
        text = relative.as_posix()
        return "" if text == "." else text

    def _sample_date(self, directory: Path, sample: list[str]) -> Optional[DateInfo]:
        for name in sample:
            info = detect_date(name)
            if info is None and self.use_exif:
                info = read_exif_date(directory / name)
            if info is not None:
                return info
        return None

    def _exif_date(self, directory: Path, sample: list[str]) -> Optional[DateInfo]:
        for name in sample:
            info = read_exif_date(directory / name)
            if info is not None:
                return info
        return None

    def _sidecar_date(self, sidecar: Optional[Sidecar]) -> Optional[DateInfo]:
        if sidecar is None or not sidecar.date:
            return None
        return coerce_date(sidecar.date, source="metadata")

    def _stored_date(self, folder: Path) -> Optional[DateInfo]:
        path = folder / FOLDER_MANIFEST_NAME
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.debug("Ignoring unreadable %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            return None
        for key in _STORED_DATE_KEYS:
            info = coerce_date(data.get(key), source="manifest")
            if info is not None:
                return info
        return None

    def _read_sidecar(self, folder: Path, result: ScanResult) -> Optional[Sidecar]:
        if not self.descriptor.read_sidecar:
            return None
        path = folder / SIDECAR_NAME
        if not path.is_file():
            return None
        try:
            return Sidecar.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValidationError) as exc:
            self._warn(result, f"Invalid {SIDECAR_NAME} in {folder.name}: {exc}")
            return None

    def _fallback(self, label: str, result: ScanResult) -> DateInfo:
        info = fallback_date(self.today)
        self._warn(result, f"No date found for {label}; using {info.iso}")
        return info

    @staticmethod
    def _warn(result: ScanResult, message: str) -> None:
        LOGGER.warning(message)
        result.warnings.append(message)


__all__ = ["CollectionScanner"]
