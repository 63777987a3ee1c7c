"""Route suggestions from an OpenAI-compatible chat completion API.

Reads ``ROUTE_PROVIDER_API_KEY``, ``ROUTE_PROVIDER_BASE_URL`` and
``ROUTE_PROVIDER_MODEL`` from the environment by default.  Pass them
explicitly in tests or when integrating with secret managers.
"""

from __future__ import annotations

import json
import logging
import math
import os
import re
from typing import Protocol

from openai import OpenAI, OpenAIError

from run_scout.geo.models import Coordinate
from run_scout.routes.models import Place, RouteSuggestions

_logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_FENCE_RE = re.compile(r"```(?:json)?")

_INSTRUCTION = (
    "List 4 to 5 good running spots near the given location. Reply with only a "
    'JSON array of objects with keys "name", "lat", "lng", "summary" and '
    '"difficulty".'
)


class RouteProviderError(Exception):
    """Raised when the suggestion service cannot be reached or fails."""


class RouteSuggestionProvider(Protocol):
    def fetch(self, query: str, location: Coordinate | None = None) -> RouteSuggestions: ...


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def parse_places(text: str) -> list[Place]:
    """Extract places from the first JSON array found in *text*.

    Entries without a name or numeric coordinates are dropped.  Returns ``[]``
    on any parse or structure error.
    """
    match = _ARRAY_RE.search(text or "")
    if not match:
        return []
    try:
        items = json.loads(_FENCE_RE.sub("", match.group(0)))
    except json.JSONDecodeError:
        _logger.warning("Route provider returned an unparseable places array")
        return []
    if not isinstance(items, list):
        return []

    places: list[Place] = []
    for item in items:
        try:
            place = Place(
                name=str(item["name"]),
                lat=float(item["lat"]),
                lng=float(item["lng"]),
                summary=str(item.get("summary", "")),
                difficulty=str(item.get("difficulty", "")),
            )
        except (KeyError, ValueError, TypeError, AttributeError):
            continue
        if place.name and math.isfinite(place.lat) and math.isfinite(place.lng):
            places.append(place)
    return places


def extract_sources(message) -> list[dict]:
    """Return ``{"title", "url"}`` for each URL citation attached to *message*.

    Models without web search attach no annotations; that yields ``[]``.
    """
    sources: list[dict] = []
    for annotation in getattr(message, "annotations", None) or []:
        citation = getattr(annotation, "url_citation", None)
        if getattr(annotation, "type", None) != "url_citation" or citation is None:
            continue
        sources.append({"title": citation.title or citation.url, "url": citation.url})
    return sources


def build_user_prompt(query: str, location: Coordinate | None = None) -> str:
    """Return the user message for *query*, with coordinates when known."""
    prompt = f"Location: {query}"
    if location is not None:
        prompt += f" (lat {location.latitude:.5f}, lng {location.longitude:.5f})"
    return prompt


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class RouteSuggestionClient:
    """Chat completion client returning :class:`RouteSuggestions`.

    Args:
        api_key: API key; falls back to ``ROUTE_PROVIDER_API_KEY``.
        base_url: Endpoint; falls back to ``ROUTE_PROVIDER_BASE_URL``, then
            the SDK default.
        model: Model identifier; falls back to ``ROUTE_PROVIDER_MODEL``.
        timeout: Request timeout in seconds.
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        key = api_key or os.environ.get("ROUTE_PROVIDER_API_KEY", "")
        url = base_url or os.environ.get("ROUTE_PROVIDER_BASE_URL") or None
        self._client = OpenAI(api_key=key, base_url=url, timeout=timeout)
        self._model = model or os.environ.get("ROUTE_PROVIDER_MODEL", self.DEFAULT_MODEL)

    def fetch(self, query: str, location: Coordinate | None = None) -> RouteSuggestions:
        """Ask for running spots near *query* / *location*.

        A reply that contains no usable JSON yields zero places rather than
        an error.

        Raises
        ------
        RouteProviderError
            If the API call fails.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": _INSTRUCTION},
                    {"role": "user", "content": build_user_prompt(query, location)},
                ],
            )
        except OpenAIError as exc:
            _logger.warning("Route provider call failed: %s", exc)
            raise RouteProviderError(str(exc)) from exc

        message = response.choices[0].message
        text = message.content or ""
        places = parse_places(text)
        _logger.info("Route provider returned %d place(s) for %r", len(places), query)
        return RouteSuggestions(text=text, places=places, sources=extract_sources(message))
