"""Tests for cross-portfolio featured selection."""

import json
from datetime import date
from pathlib import Path

import pytest

from foliogen.manifest import (
    FeaturedError,
    ManifestError,
    load_manifest,
    load_portfolio_manifests,
    manifest_path,
    normalize_manifest,
    select_featured,
)

GENERATED = "2026-10-18T12:00:00.000Z"


def _concert_manifest() -> dict:
    return {
        "type": "concert",
        "version": "1.0.0",
        "bands": [
            {
                "bandName": "Haven",
                "folderPath": "Haven",
                "date": {"year": 2025, "month": 8, "day": 29},
                "dateDisplay": "August 2025",
                "tags": ["concert", "live music"],
                "images": ["250829_Haven_001.jpg", "250829_Haven_002.jpg"],
            },
            {
                "bandName": "Rival Sons",
                "folderPath": "Rival Sons",
                "date": {"year": 2024, "month": 8, "day": 1},
                "images": ["img1.jpg"],
            },
            {
                "bandName": "Opener",
                "folderPath": "Opener",
                "date": {"year": 2022, "month": 3, "day": 3},
                "images": ["img2.jpg"],
            },
        ],
    }


def _events_manifest() -> dict:
    return {
        "type": "events",
        "version": "1.0.0",
        "events": [
            {
                "eventName": "Gala",
                "folderPath": "gala",
                "date": {"year": 2025, "month": 9, "day": 1},
                "images": ["g1.jpg"],
            },
            {
                "eventName": "Summit",
                "folderPath": "summit",
                "date": {"year": 2023, "month": 1, "day": 1},
                "images": ["s1.jpg", "s2.jpg"],
            },
            {
                "eventName": "Undated",
                "folderPath": "undated",
                "images": ["2021-06-06_u.jpg"],
            },
        ],
    }


def test_normalize_manifest_maps_entries_to_items() -> None:
    manifest = load_manifest(_concert_manifest())

    items = normalize_manifest("concert", manifest)

    haven = items[0]
    assert haven.id == "concert:Haven"
    assert haven.title == "Haven"
    assert haven.type == "Concert"
    assert haven.category == "Concert Photography"
    assert haven.cover_image == "250829_Haven_001.jpg"
    assert haven.total_images == 2
    assert haven.tags == ["concert", "live music", "Performance"]


def test_normalize_manifest_infers_missing_dates_from_images() -> None:
    items = normalize_manifest("events", load_manifest(_events_manifest()))

    undated = items[2]
    assert undated.date.iso == "2021-06-06"
    assert undated.date_display == "June 2021"


def test_select_featured_limits_per_type_and_total() -> None:
    per_type = {
        "concert": load_manifest(_concert_manifest()),
        "events": load_manifest(_events_manifest()),
    }

    featured = select_featured(per_type, 2, 3, version="2.0.0", generated=GENERATED)

    data = featured.to_json_dict()
    assert [item["id"] for item in data["items"]] == [
        "events:gala",
        "concert:Haven",
        "concert:Rival Sons",
    ]
    assert data["type"] == "featured"
    assert data["totalItems"] == 3
    assert data["totalImages"] == 4
    assert data["sources"] == ["concert-manifest.json", "events-manifest.json"]
    assert data["portfolioTypes"] == ["Concert", "Events"]
    assert data["categories"] == ["Concert Photography", "Events Photography"]
    assert data["dateRange"] == {"newest": "2025-09-01", "oldest": "2024-08-01"}
    assert data["config"] == {"itemsPerCategory": 2, "totalLimit": 3}


def test_select_featured_without_items_raises() -> None:
    empty = load_manifest({"type": "concert", "bands": []})

    with pytest.raises(FeaturedError):
        select_featured({"concert": empty}, 4, 12, version="2.0.0", today=date(2026, 10, 18))


def test_load_portfolio_manifests_skips_missing_files(tmp_path: Path) -> None:
    path = manifest_path(tmp_path, "concert")
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(_concert_manifest()), encoding="utf-8")

    loaded = load_portfolio_manifests(tmp_path, ["concert", "events"])

    assert list(loaded) == ["concert"]
    assert path == tmp_path / "Concert" / "concert-manifest.json"


def test_load_portfolio_manifests_rejects_corrupt_file(tmp_path: Path) -> None:
    path = manifest_path(tmp_path, "events")
    path.parent.mkdir(parents=True)
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(ManifestError):
        load_portfolio_manifests(tmp_path, ["events"])


def test_load_portfolio_manifests_drops_invalid_entries(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    data = _concert_manifest()
    data["bands"] = [data["bands"][0], {"folderPath": "NoName", "images": ["b.jpg"]}]
    path = manifest_path(tmp_path, "concert")
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(data), encoding="utf-8")

    with caplog.at_level("WARNING", logger="foliogen.manifest.featured"):
        loaded = load_portfolio_manifests(tmp_path, ["concert"])
    featured = select_featured(loaded, 4, 12, version="2.0.0", generated=GENERATED)

    assert [item.name for item in featured.items] == ["Haven"]
    assert loaded["concert"].version == "1.0.0"
    assert "Skipping invalid concert entry 1" in caplog.text
