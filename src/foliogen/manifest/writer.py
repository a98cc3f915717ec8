"""Idempotent manifest persistence."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from foliogen.models import CamelModel
from foliogen.scanning import Collection

from .aggregator import build_entry
from .errors import ManifestWriteError
from .models import utc_timestamp

LOGGER = logging.getLogger(__name__)

FOLDER_MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write request.

    Attributes:
        path: Target file.
        written: True when the file was (re)written.
        changed: True when the new content differs from what is on disk.
        dry_run: True when the request only previewed the write.
    """

    path: Path
    written: bool
    changed: bool
    dry_run: bool = False


class ManifestWriter:
    """Serialize manifests and skip writes that would not change the file."""

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    def render(self, payload: Mapping[str, Any]) -> str:
        """Return the on-disk text for ``payload``."""
        return json.dumps(payload, indent=self._indent, ensure_ascii=False) + "\n"

    def write_if_changed(
        self,
        path: Path,
        manifest: CamelModel | Mapping[str, Any],
        *,
        force: bool = False,
        dry_run: bool = False,
    ) -> WriteResult:
        """Write ``manifest`` to ``path`` unless the file already holds the same content.

        When the existing file differs only by its ``generated`` stamp, that stamp
        is kept so unchanged inputs serialize to identical bytes.

        Args:
            path: Destination file.
            manifest: Manifest model or JSON-ready mapping.
            force: Rewrite even when the content is unchanged.
            dry_run: Compute the outcome without touching the disk.

        Returns:
            WriteResult: What happened.

        Raises:
            ManifestWriteError: If the file cannot be written.
        """
        if isinstance(manifest, CamelModel):
            payload = manifest.to_json_dict()
        else:
            payload = dict(manifest)

        existing = self._read_existing(path)
        if existing is not None:
            payload = self._reuse_generated(payload, existing)
        content = self.render(payload)
        changed = existing != content

        if dry_run:
            LOGGER.info("Dry run: %s would be %s.", path, "written" if changed or force else "left unchanged")
            return WriteResult(path=path, written=False, changed=changed, dry_run=True)

        if not changed and not force:
            LOGGER.info("%s unchanged, skipping.", path)
            return WriteResult(path=path, written=False, changed=False)

        self._atomic_write(path, content)
        LOGGER.info("Wrote %s.", path)
        return WriteResult(path=path, written=True, changed=changed)

    def write_folder_manifests(
        self,
        portfolio_type: str,
        collections: Iterable[Collection],
        *,
        version: str,
        force: bool = False,
        dry_run: bool = False,
    ) -> list[WriteResult]:
        """Write the legacy per-folder ``manifest.json`` next to each collection's images."""
        results: list[WriteResult] = []
        generated = utc_timestamp()
        for collection in collections:
            if collection.directory is None:
                continue
            payload = build_entry(portfolio_type, collection).to_json_dict()
            payload["version"] = version
            payload["generated"] = generated
            results.append(
                self.write_if_changed(
                    collection.directory / FOLDER_MANIFEST_NAME,
                    payload,
                    force=force,
                    dry_run=dry_run,
                )
            )
        return results

    @staticmethod
    def _read_existing(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.debug("Could not read existing manifest %s: %s", path, exc)
            return None

    @staticmethod
    def _reuse_generated(payload: dict[str, Any], existing: str) -> dict[str, Any]:
        try:
            previous = json.loads(existing)
        except json.JSONDecodeError:
            return payload
        if not isinstance(previous, dict) or "generated" not in previous:
            return payload
        current = {key: value for key, value in payload.items() if key != "generated"}
        stored = {key: value for key, value in previous.items() if key != "generated"}
        if current != stored:
            return payload
        reused = dict(payload)
        reused["generated"] = previous["generated"]
        return reused

    @staticmethod
    def _atomic_write(path: Path, content: str) -> None:
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(content)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ManifestWriteError(f"Could not write {path}: {exc}") from exc


__all__ = ["FOLDER_MANIFEST_NAME", "ManifestWriter", "WriteResult"]
