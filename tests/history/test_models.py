"""Tests for RunHistoryEntry serialization and timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from run_scout.geo.models import Coordinate
from run_scout.history.models import RunHistoryEntry, parse_iso8601, to_iso8601
from run_scout.tracking.models import RunMetrics


def _persisted(**overrides) -> dict:
    record = {
        "id": "1761000000000",
        "date": "2026-02-25T10:00:00.000Z",
        "placeName": "Parque Ibirapuera",
        "metrics": {
            "distanceKm": 5.2,
            "elapsedTimeSeconds": 1800,
            "currentPace": "05:46",
            "path": [{"latitude": -23.5874, "longitude": -46.6576}],
            "isTracking": False,
        },
    }
    record.update(overrides)
    return record


def test_to_iso8601_millisecond_utc():
    moment = datetime(2026, 2, 25, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert to_iso8601(moment) == "2026-02-25T10:00:00.123Z"


def test_to_iso8601_converts_offset_to_utc():
    moment = datetime(2026, 2, 25, 7, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert to_iso8601(moment) == "2026-02-25T10:00:00.000Z"


def test_parse_iso8601_accepts_z_suffix_and_naive():
    assert parse_iso8601("2026-02-25T10:00:00.000Z") == datetime(
        2026, 2, 25, 10, tzinfo=timezone.utc
    )
    assert parse_iso8601("2026-02-25T10:00:00").tzinfo is timezone.utc


def test_from_dict_reads_persisted_record():
    entry = RunHistoryEntry.from_dict(_persisted())
    assert entry.id == "1761000000000"
    assert entry.place_name == "Parque Ibirapuera"
    assert entry.metrics.distance_km == pytest.approx(5.2)
    assert entry.metrics.path == [Coordinate(-23.5874, -46.6576)]


def test_to_dict_matches_persisted_shape():
    record = _persisted()
    assert RunHistoryEntry.from_dict(record).to_dict() == record


def test_from_dict_rejects_bad_date():
    with pytest.raises(ValueError):
        RunHistoryEntry.from_dict(_persisted(date="yesterday"))


def test_from_dict_rejects_missing_metrics():
    record = _persisted()
    del record["metrics"]
    with pytest.raises(KeyError):
        RunHistoryEntry.from_dict(record)


def test_entry_is_frozen():
    entry = RunHistoryEntry("1", "2026-02-25T10:00:00.000Z", "x", RunMetrics())
    with pytest.raises(AttributeError):
        entry.place_name = "y"  # type: ignore[misc]
