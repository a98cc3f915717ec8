"""Tests for manual date overrides."""

import json
from pathlib import Path

from foliogen.dates import DateInfo, OverrideCache, OverrideResolver, format_override, normalize_key


def _write_overrides(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "date-overrides.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_resolve_returns_first_matching_candidate(tmp_path: Path) -> None:
    path = _write_overrides(
        tmp_path,
        {
            "Concert/Haven": {"dateISO": "2023-06-10", "notes": "From the ticket stub"},
            "Haven": {"year": 2020, "month": 1, "day": 1},
        },
    )
    resolver = OverrideResolver(path)

    override = resolver.resolve(["Concert/Haven", "Haven"])

    assert override is not None
    assert override.key == "Concert/Haven"
    assert override.date.iso == "2023-06-10"
    assert override.date_source == "manual:override"
    assert override.date_confidence == "high"
    assert override.date_display == "June 2023"
    assert override.notes == "From the ticket stub"


def test_invalid_entry_falls_through_to_next_key(tmp_path: Path) -> None:
    path = _write_overrides(
        tmp_path,
        {
            "Concert/Haven": {"year": 2024, "month": 2, "day": 30},
            "Haven": {"year": 2022, "month": 11},
        },
    )

    override = OverrideResolver(path).resolve(["Concert/Haven", "Haven"])

    assert override is not None
    assert override.key == "Haven"
    assert override.date.iso == "2022-11-01"


def test_iso_with_trailing_text_is_not_an_override(tmp_path: Path) -> None:
    path = _write_overrides(
        tmp_path,
        {"Concert/Haven": {"dateISO": "2024-12-13junk"}, "Haven": {"dateISO": "2023-01-20"}},
    )

    override = OverrideResolver(path).resolve(["Concert/Haven", "Haven"])

    assert override is not None
    assert override.key == "Haven"
    assert override.date.iso == "2023-01-20"


def test_backslash_keys_are_normalized(tmp_path: Path) -> None:
    path = _write_overrides(tmp_path, {"Events/Gala": {"dateISO": "2021-09-09"}})

    override = OverrideResolver(path).resolve(["Events\\Gala"])

    assert normalize_key("Events\\\\Gala") == "Events/Gala"
    assert override is not None
    assert override.date.iso == "2021-09-09"


def test_missing_or_malformed_file_yields_no_overrides(tmp_path: Path) -> None:
    assert OverrideResolver(tmp_path / "absent.json").resolve(["anything"]) is None

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert OverrideResolver(broken).resolve(["anything"]) is None

    listing = _write_overrides(tmp_path, ["not", "a", "mapping"])
    assert OverrideResolver(listing).resolve(["not"]) is None


def test_cache_is_reused_until_cleared(tmp_path: Path) -> None:
    path = _write_overrides(tmp_path, {"Haven": {"dateISO": "2023-06-10"}})
    cache = OverrideCache()
    resolver = OverrideResolver(path, cache=cache)

    assert resolver.resolve(["Haven"]) is not None
    path.write_text(json.dumps({}), encoding="utf-8")
    assert resolver.resolve(["Haven"]) is not None

    cache.clear()
    assert resolver.resolve(["Haven"]) is None


def test_format_override_keeps_custom_provenance() -> None:
    override = format_override(
        {
            "dateISO": "2019-05-04",
            "dateSource": "manual:ticket",
            "dateConfidence": "medium",
            "dateDisplay": "Spring 2019",
        },
        key="Journalism/Strike",
    )

    assert override is not None
    assert override.date_source == "manual:ticket"
    assert override.date_confidence == "medium"
    assert override.date_display == "Spring 2019"
    assert format_override("2019-05-04") is None


def test_apply_replaces_date_and_provenance(tmp_path: Path) -> None:
    path = _write_overrides(tmp_path, {"Haven": {"dateISO": "2023-06-10", "notes": "corrected"}})
    resolver = OverrideResolver(path)
    inferred = DateInfo(year=2025, month=1, day=1, source="fallback", confidence="low")

    override = resolver.resolve(["Haven"])
    assert override is not None
    applied = resolver.apply(inferred, override)

    assert applied.iso == "2023-06-10"
    assert applied.month_name == "June"
    assert applied.source == "manual:override"
    assert applied.confidence == "high"
    assert applied.display == "June 2023"
    assert applied.notes == "corrected"
    assert inferred.iso == "2025-01-01"
