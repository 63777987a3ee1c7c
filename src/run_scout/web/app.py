"""FastAPI Web application — route discovery, live run tracking and history.

Run with ``uvicorn --factory run_scout.web.app:create_app``.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Request

from run_scout.geo.models import Coordinate
from run_scout.history.recorder import RunHistoryRecorder
from run_scout.history.store import KeyValueStore, SQLiteKeyValueStore
from run_scout.routes.provider import (
    RouteProviderError,
    RouteSuggestionClient,
    RouteSuggestionProvider,
)
from run_scout.tracking.position import (
    PositionError,
    PositionErrorReason,
    PushPositionSource,
    request_current_position,
)
from run_scout.tracking.session import RunSessionTracker
from run_scout.web.schemas import (
    CoordinateModel,
    HealthResponse,
    HistoryEntryModel,
    HistoryResponse,
    MetricsModel,
    PermissionRequest,
    PlaceModel,
    PlacesResponse,
    PositionErrorRequest,
    PushResponse,
    SessionResponse,
    SourceModel,
    StartRequest,
    StopResponse,
)

load_dotenv()  # loads .env from project root; must run before env vars are consumed

VERSION = "0.1.0"
POSITION_TIMEOUT_S = 1.0

router = APIRouter()


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------


def create_app(
    db_path: str | None = None,
    store: KeyValueStore | None = None,
    ticker=None,
    provider: RouteSuggestionProvider | None = None,
) -> FastAPI:
    """Build the application with its own store, position source and tracker.

    Parameters
    ----------
    db_path:
        SQLite file for run history; defaults to ``$RUN_SCOUT_DB`` or
        ``run_scout.db``.  Ignored when *store* is given.
    store:
        Pre-built key-value store (tests pass a memory store).
    ticker:
        Ticker for the tracker; defaults to a 1 s real-time timer.
    provider:
        Route suggestion provider; a :class:`RouteSuggestionClient` is
        created on first use when not provided.
    """
    if store is None:
        store = SQLiteKeyValueStore(db_path or os.environ.get("RUN_SCOUT_DB", "run_scout.db"))
    source = PushPositionSource()
    recorder = RunHistoryRecorder(store)
    tracker = RunSessionTracker(source, recorder, ticker=ticker)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # A run left open when the server goes down is stopped (and saved).
        tracker.close()
        store.close()

    app = FastAPI(title="Run Scout", version=VERSION, lifespan=lifespan)
    app.state.store = store
    app.state.source = source
    app.state.recorder = recorder
    app.state.tracker = tracker
    app.state.provider = provider
    app.include_router(router)
    return app


def _tracker(request: Request) -> RunSessionTracker:
    return request.app.state.tracker


def _known_position(request: Request) -> Coordinate:
    """Last fix seen by the tracker, else a one-shot request to the source.

    Raises
    ------
    PositionError
        If the source has no fix or refuses access.
    """
    tracker = _tracker(request)
    if tracker.current_position is None:
        tracker.current_position = request_current_position(
            request.app.state.source, timeout=POSITION_TIMEOUT_S
        )
    return tracker.current_position


def _provider(request: Request) -> RouteSuggestionProvider:
    if request.app.state.provider is None:
        request.app.state.provider = RouteSuggestionClient()
    return request.app.state.provider


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@router.post("/api/position", response_model=PushResponse)
def push_position(request: Request, fix: CoordinateModel) -> PushResponse:
    """Accept a device fix and feed it to any running session."""
    coord = fix.to_coordinate()
    _tracker(request).current_position = coord
    delivered = request.app.state.source.push(coord)
    return PushResponse(delivered=delivered)


@router.post("/api/position/error", response_model=PushResponse)
def push_position_error(request: Request, body: PositionErrorRequest) -> PushResponse:
    """Report a device position error to any running session."""
    try:
        reason = PositionErrorReason(body.reason)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Unknown reason {body.reason!r}") from exc
    delivered = request.app.state.source.push_error(PositionError(reason, body.message))
    return PushResponse(delivered=delivered)


@router.put("/api/position/permission", response_model=PermissionRequest)
def set_permission(request: Request, body: PermissionRequest) -> PermissionRequest:
    """Grant or revoke location access for new sessions."""
    request.app.state.source.set_denied(not body.granted)
    return body


@router.get("/api/position", response_model=CoordinateModel)
def current_position(request: Request) -> CoordinateModel:
    try:
        position = _known_position(request)
    except PositionError as exc:
        if exc.is_permission_denied:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        raise HTTPException(status_code=404, detail="No position known yet") from exc
    return CoordinateModel.from_coordinate(position)


@router.get("/api/session", response_model=SessionResponse)
def session_state(request: Request) -> SessionResponse:
    tracker = _tracker(request)
    error = tracker.last_error
    return SessionResponse(
        place_name=tracker.place_name,
        metrics=MetricsModel.from_metrics(tracker.metrics),
        last_error=error.reason.value if error else None,
    )


@router.post("/api/session/start", response_model=SessionResponse)
def start_session(request: Request, body: StartRequest | None = None) -> SessionResponse:
    """Start a run; 409 if one is already running, 403 if location is denied."""
    tracker = _tracker(request)
    place_name = body.place_name if body else None
    try:
        started = tracker.start(place_name)
    except PositionError as exc:
        status = 403 if exc.is_permission_denied else 409
        raise HTTPException(status_code=status, detail=str(exc)) from exc
    if not started:
        raise HTTPException(status_code=409, detail="A run is already being tracked")
    return SessionResponse(place_name=place_name, metrics=MetricsModel.from_metrics(tracker.metrics))


@router.post("/api/session/stop", response_model=StopResponse)
def stop_session(request: Request) -> StopResponse:
    """Stop the run.  Returns nulls when nothing was running."""
    tracker = _tracker(request)
    final = tracker.stop()
    if final is None:
        return StopResponse(metrics=None, entry=None)
    entry = tracker.last_entry
    return StopResponse(
        metrics=MetricsModel.from_metrics(final),
        entry=HistoryEntryModel.from_entry(entry) if entry else None,
    )


@router.get("/api/history", response_model=HistoryResponse)
def history(request: Request) -> HistoryResponse:
    """Return saved runs, newest first."""
    entries = request.app.state.recorder.load()
    return HistoryResponse(runs=[HistoryEntryModel.from_entry(e) for e in entries])


@router.get("/api/places", response_model=PlacesResponse)
def places(
    request: Request,
    query: str = "",
    lat: float | None = None,
    lng: float | None = None,
) -> PlacesResponse:
    """Suggest running spots; distances are filled in when the user position is known."""
    if lat is not None and lng is not None:
        origin: Coordinate | None = Coordinate(lat, lng)
    else:
        try:
            origin = _known_position(request)
        except PositionError:
            origin = None
    if not query.strip() and origin is None:
        raise HTTPException(status_code=422, detail="Provide a query or coordinates")

    try:
        result = _provider(request).fetch(query or "my current location", origin)
    except RouteProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return PlacesResponse(
        query=query,
        text=result.text,
        places=[
            PlaceModel(
                name=p.name,
                lat=p.lat,
                lng=p.lng,
                summary=p.summary,
                difficulty=p.difficulty,
                distance_km=p.distance_from(origin) if origin else None,
            )
            for p in result.places
        ],
        sources=[SourceModel(**s) for s in result.sources],
    )
