"""Tests for manifest aggregation and idempotent persistence."""

import json
from pathlib import Path

import pytest

from foliogen.dates import DateInfo
from foliogen.manifest import (
    ConcertManifest,
    ManifestWriteError,
    ManifestWriter,
    aggregate,
    load_manifest,
    sort_newest_first,
)
from foliogen.scanning import Collection, Publication

GENERATED = "2026-10-18T12:00:00.000Z"


def _collection(
    name: str,
    iso: str,
    *,
    images: list[str] | None = None,
    tags: list[str] | None = None,
    category: str | None = None,
    directory: Path | None = None,
    **extra: object,
) -> Collection:
    year, month, day = (int(part) for part in iso.split("-"))
    info = DateInfo(year=year, month=month, day=day, source="yyyymmdd_dash")
    return Collection(
        name=name,
        folder_path=name,
        date=info,
        date_display=info.label,
        images=images or [f"{iso}_001.jpg"],
        tags=tags or [],
        category=category,
        directory=directory,
        **extra,
    )


def test_sort_newest_first_is_stable() -> None:
    collections = [
        _collection("A", "2023-01-01"),
        _collection("B", "2024-06-01"),
        _collection("C", "2023-01-01"),
    ]

    ordered = sort_newest_first(collections)

    assert [collection.name for collection in ordered] == ["B", "A", "C"]


def test_aggregate_concert_manifest_totals_and_aliases() -> None:
    manifest = aggregate(
        "concert",
        [
            _collection("Haven", "2025-08-29", images=["b.jpg", "a.jpg"], tags=["concert"]),
            _collection("Rival Sons", "2024-08-01", tags=["concert", "rock"]),
        ],
        version="1.0.0",
        generated=GENERATED,
    )

    data = manifest.to_json_dict()
    assert data["type"] == "concert"
    assert data["generated"] == GENERATED
    assert data["totalBands"] == 2
    assert data["totalImages"] == 3
    assert data["tags"] == ["concert", "rock"]
    first = data["bands"][0]
    assert first["bandName"] == "Haven"
    assert first["folderPath"] == "Haven"
    assert first["images"] == ["a.jpg", "b.jpg"]
    assert first["totalImages"] == 2
    assert first["date"]["iso"] == "2025-08-29"
    assert first["date"]["monthName"] == "August"
    assert first["dateSource"] == "yyyymmdd_dash"
    assert "category" not in first


def test_aggregate_events_and_journalism_category_tables() -> None:
    events = aggregate(
        "events",
        [
            _collection("Gala", "2024-01-01", category="Celebration"),
            _collection("Summit", "2023-01-01", category="Conference"),
            _collection("Ball", "2022-01-01", category="Celebration"),
        ],
        version="1.0.0",
        generated=GENERATED,
    ).to_json_dict()

    assert events["totalEvents"] == 3
    assert events["categories"] == ["Celebration", "Conference"]
    assert events["categoryCounts"] == {"Celebration": 2, "Conference": 1}
    assert events["events"][0]["eventName"] == "Gala"

    journalism = aggregate(
        "journalism",
        [
            _collection(
                "Port Strike",
                "2023-11-20",
                category="Labor",
                published=True,
                publication=Publication(outlet="Harbor Gazette"),
            )
        ],
        version="1.0.0",
        generated=GENERATED,
    ).to_json_dict()

    assert journalism["categoryStats"] == {"Labor": 1}
    story = journalism["events"][0]
    assert story["published"] is True
    assert story["outlet"] == "Harbor Gazette"


def test_aggregate_empty_collection_set() -> None:
    data = aggregate("nature", [], version="1.0.0", generated=GENERATED).to_json_dict()

    assert data["totalCollections"] == 0
    assert data["totalImages"] == 0
    assert data["collections"] == []


def test_write_if_changed_skips_identical_content(tmp_path: Path) -> None:
    target = tmp_path / "concert-manifest.json"
    writer = ManifestWriter()
    collections = [_collection("Haven", "2025-08-29")]

    first = writer.write_if_changed(
        target, aggregate("concert", collections, version="1.0.0", generated=GENERATED)
    )
    before = target.stat().st_mtime_ns
    second = writer.write_if_changed(
        target,
        aggregate("concert", collections, version="1.0.0", generated="2030-01-01T00:00:00.000Z"),
    )

    assert first.written is True
    assert second.written is False
    assert second.changed is False
    assert target.stat().st_mtime_ns == before
    assert json.loads(target.read_text(encoding="utf-8"))["generated"] == GENERATED
    assert [path.name for path in tmp_path.iterdir()] == ["concert-manifest.json"]


def test_write_if_changed_rewrites_on_change_or_force(tmp_path: Path) -> None:
    target = tmp_path / "concert-manifest.json"
    writer = ManifestWriter()
    manifest = aggregate("concert", [_collection("Haven", "2025-08-29")], version="1.0.0", generated=GENERATED)
    writer.write_if_changed(target, manifest)

    forced = writer.write_if_changed(target, manifest, force=True)
    changed = writer.write_if_changed(
        target,
        aggregate("concert", [_collection("Haven", "2025-08-30")], version="1.0.0", generated=GENERATED),
    )

    assert forced.written is True
    assert forced.changed is False
    assert changed.written is True
    assert changed.changed is True
    stored = json.loads(target.read_text(encoding="utf-8"))
    assert stored["bands"][0]["date"]["iso"] == "2025-08-30"


def test_dry_run_never_touches_disk(tmp_path: Path) -> None:
    target = tmp_path / "concert-manifest.json"
    manifest = aggregate("concert", [_collection("Haven", "2025-08-29")], version="1.0.0")

    result = ManifestWriter().write_if_changed(target, manifest, dry_run=True)

    assert result.dry_run is True
    assert result.written is False
    assert result.changed is True
    assert not target.exists()


def test_write_failure_raises_manifest_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")

    with pytest.raises(ManifestWriteError):
        ManifestWriter().write_if_changed(blocker / "concert-manifest.json", {"type": "concert"})


def test_write_folder_manifests_places_entry_next_to_images(tmp_path: Path) -> None:
    folder = tmp_path / "Haven"
    folder.mkdir()
    collection = _collection("Haven", "2025-08-29", directory=folder)

    results = ManifestWriter().write_folder_manifests("concert", [collection], version="1.0.0")

    assert [result.written for result in results] == [True]
    stored = json.loads((folder / "manifest.json").read_text(encoding="utf-8"))
    assert stored["bandName"] == "Haven"
    assert stored["version"] == "1.0.0"
    assert "directory" not in stored


def test_load_manifest_accepts_legacy_entries() -> None:
    manifest = load_manifest(
        {
            "bands": [
                {
                    "bandName": "Haven",
                    "concertDate": {"year": 2024, "month": 2, "day": 30},
                    "images": [{"path": "a.jpg"}, "b.jpg"],
                },
                {"bandName": "Rival Sons", "dateISO": "2023-07-04", "images": ["c.jpg"]},
            ]
        },
        "concert",
    )

    assert isinstance(manifest, ConcertManifest)
    haven, rival = manifest.entries()
    assert haven.date is None
    assert haven.images == ["a.jpg", "b.jpg"]
    assert haven.total_images == 2
    assert rival.date is not None
    assert rival.date.iso == "2023-07-04"
