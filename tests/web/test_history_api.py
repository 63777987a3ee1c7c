"""GET /api/history."""

from __future__ import annotations

import json

from run_scout.history.recorder import HISTORY_KEY


def _record(run_id: str, date: str, place: str) -> dict:
    return {
        "id": run_id,
        "date": date,
        "placeName": place,
        "metrics": {
            "distanceKm": 5.0,
            "elapsedTimeSeconds": 1530,
            "currentPace": "05:06",
            "path": [],
            "isTracking": False,
        },
    }


def test_history_empty(client):
    assert client.get("/api/history").json() == {"runs": []}


def test_history_newest_first(client, store):
    store.set(
        HISTORY_KEY,
        json.dumps(
            [
                _record("1", "2026-01-01T07:00:00.000Z", "January"),
                _record("2", "2026-03-01T07:00:00.000Z", "March"),
            ]
        ),
    )
    runs = client.get("/api/history").json()["runs"]
    assert [r["place_name"] for r in runs] == ["March", "January"]
    assert runs[0]["metrics"]["elapsed_time"] == "25:30"


def test_history_corrupt_store_returns_empty(client, store):
    store.set(HISTORY_KEY, "not json at all")
    resp = client.get("/api/history")
    assert resp.status_code == 200
    assert resp.json() == {"runs": []}
