"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel

from run_scout.geo.calculations import format_time
from run_scout.geo.models import Coordinate
from run_scout.history.models import RunHistoryEntry
from run_scout.tracking.models import RunMetrics


class CoordinateModel(BaseModel):
    latitude: float
    longitude: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_coordinate(cls, c: Coordinate) -> CoordinateModel:
        return cls(latitude=c.latitude, longitude=c.longitude)


class PositionErrorRequest(BaseModel):
    reason: str = "unavailable"
    message: str = ""


class PermissionRequest(BaseModel):
    granted: bool


class StartRequest(BaseModel):
    place_name: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str


class PushResponse(BaseModel):
    delivered: int


class MetricsModel(BaseModel):
    distance_km: float
    elapsed_time_seconds: int
    elapsed_time: str
    current_pace: str
    path: list[CoordinateModel]
    is_tracking: bool

    @classmethod
    def from_metrics(cls, m: RunMetrics) -> MetricsModel:
        return cls(
            distance_km=m.distance_km,
            elapsed_time_seconds=m.elapsed_time_seconds,
            elapsed_time=format_time(m.elapsed_time_seconds),
            current_pace=m.current_pace,
            path=[CoordinateModel.from_coordinate(c) for c in m.path],
            is_tracking=m.is_tracking,
        )


class HistoryEntryModel(BaseModel):
    id: str
    date: str
    place_name: str
    metrics: MetricsModel

    @classmethod
    def from_entry(cls, e: RunHistoryEntry) -> HistoryEntryModel:
        return cls(
            id=e.id,
            date=e.date,
            place_name=e.place_name,
            metrics=MetricsModel.from_metrics(e.metrics),
        )


class SessionResponse(BaseModel):
    place_name: str | None
    metrics: MetricsModel
    last_error: str | None = None


class StopResponse(BaseModel):
    metrics: MetricsModel | None
    entry: HistoryEntryModel | None


class HistoryResponse(BaseModel):
    runs: list[HistoryEntryModel]


class PlaceModel(BaseModel):
    name: str
    lat: float
    lng: float
    summary: str
    difficulty: str
    distance_km: float | None = None


class SourceModel(BaseModel):
    title: str
    url: str


class PlacesResponse(BaseModel):
    query: str
    text: str
    places: list[PlaceModel]
    sources: list[SourceModel] = []
