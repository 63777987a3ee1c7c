"""Running-spot suggestions.

Public API
----------
Place                  - a suggested running spot
RouteSuggestions       - provider answer (text + places)
RouteSuggestionClient  - OpenAI-compatible provider client
RouteProviderError     - raised when the provider call fails
parse_places           - tolerant JSON extraction from provider text
"""

from run_scout.routes.models import Place, RouteSuggestions
from run_scout.routes.provider import (
    RouteProviderError,
    RouteSuggestionClient,
    RouteSuggestionProvider,
    parse_places,
)

__all__ = [
    "Place",
    "RouteProviderError",
    "RouteSuggestionClient",
    "RouteSuggestionProvider",
    "RouteSuggestions",
    "parse_places",
]
