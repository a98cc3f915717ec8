"""Tests for structural manifest validation."""

import json
from pathlib import Path

from foliogen.manifest import validate_tree
from foliogen.manifest.validation import check_manifest


def _write(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_consistent_manifests_pass(tmp_path: Path) -> None:
    _write(
        tmp_path / "Nature" / "nature-manifest.json",
        {
            "type": "nature",
            "totalCollections": 2,
            "totalImages": 3,
            "collections": [
                {"collectionName": "Heron", "date": {"iso": "2024-04-01"}, "totalImages": 2, "images": ["a", "b"]},
                {"collectionName": "Coast", "date": {"iso": "2023-01-01"}, "totalImages": 1, "images": ["c"]},
            ],
        },
    )
    _write(tmp_path / "Nature" / "Coast" / "manifest.json", {"collectionName": "Coast", "images": []})
    (tmp_path / "Nature" / "notes.json").write_text("{}", encoding="utf-8")

    report = validate_tree(tmp_path)

    assert report.ok
    assert [path.name for path in report.checked] == ["manifest.json", "nature-manifest.json"]


def test_mismatched_totals_and_order_are_reported(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "featured-manifest.json",
        {
            "type": "featured",
            "totalItems": 3,
            "items": [
                {"id": "a", "date": {"iso": "2020-01-01"}, "totalImages": 1, "images": ["x"]},
                {"id": "b", "date": {"iso": "2024-01-01"}, "totalImages": 2, "images": ["y"]},
            ],
        },
    )

    problems = check_manifest(path)

    assert "totalItems is 3 but items has 2" in problems
    assert "items[1].totalImages does not match its images" in problems
    assert "items[1] is newer than the entry before it" in problems


def test_unparseable_and_mistyped_files(tmp_path: Path) -> None:
    broken = tmp_path / "concert-manifest.json"
    broken.write_text("{oops", encoding="utf-8")
    listing = _write(tmp_path / "Band" / "manifest.json", {"images": "a.jpg", "totalImages": "1"})

    report = validate_tree(tmp_path)

    assert not report.ok
    assert check_manifest(broken)[0].startswith("failed to parse")
    assert check_manifest(listing) == ["images is not an array", "totalImages is not a number"]
