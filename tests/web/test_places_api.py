"""GET /api/places."""

from __future__ import annotations

import pytest

from run_scout.geo.models import Coordinate
from run_scout.routes.models import RouteSuggestions
from run_scout.routes.provider import RouteProviderError


def test_places_by_query(client, provider):
    resp = client.get("/api/places", params={"query": "Ibirapuera"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["query"] == "Ibirapuera"
    assert len(data["places"]) == 2
    assert data["places"][0]["distance_km"] is None
    provider.fetch.assert_called_once_with("Ibirapuera", None)


def test_places_with_coordinates_include_distance(client):
    resp = client.get(
        "/api/places", params={"query": "", "lat": -23.5874, "lng": -46.6576}
    )
    places = resp.json()["places"]
    assert places[0]["distance_km"] == pytest.approx(0.0)
    assert places[1]["distance_km"] > 0


def test_places_use_current_position_when_no_query(client, provider):
    client.post("/api/position", json={"latitude": -23.55, "longitude": -46.63})
    resp = client.get("/api/places")
    assert resp.status_code == 200
    args = provider.fetch.call_args[0]
    assert args[0] == "my current location"
    assert args[1].latitude == pytest.approx(-23.55)
    assert resp.json()["places"][0]["distance_km"] is not None


def test_places_without_query_or_position_is_422(client):
    assert client.get("/api/places").status_code == 422


def test_places_provider_failure_is_502(client, provider):
    provider.fetch.side_effect = RouteProviderError("unreachable")
    resp = client.get("/api/places", params={"query": "x"})
    assert resp.status_code == 502


def test_places_zero_results(client, provider):
    provider.fetch.return_value = RouteSuggestions(text="nothing useful")
    resp = client.get("/api/places", params={"query": "x"})
    assert resp.status_code == 200
    assert resp.json()["places"] == []


def test_places_origin_from_source_fix(client, app, provider):
    app.state.source.push(Coordinate(-23.5874, -46.6576))
    resp = client.get("/api/places")
    assert resp.status_code == 200
    assert provider.fetch.call_args[0][1] == Coordinate(-23.5874, -46.6576)
    assert resp.json()["places"][0]["distance_km"] == pytest.approx(0.0)


def test_places_include_sources(client, provider):
    provider.fetch.return_value = RouteSuggestions(
        text="see guide",
        sources=[{"title": "Guide", "url": "https://example.test/guide"}],
    )
    resp = client.get("/api/places", params={"query": "x"})
    assert resp.json()["sources"] == [{"title": "Guide", "url": "https://example.test/guide"}]
