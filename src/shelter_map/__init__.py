"""
shelter_map package

Interaction core for a map of mountain cabins, sheds and other points of
interest: viewport-driven marker loading, marker clustering, and the
active-marker / context-menu state machine.
"""

__version__ = "0.1.0"

from .config import MapConfig, load_json
from .core import MapController, MapScene
from .errors import (
    LocationDataError,
    MarkerLoadFailure,
    ShelterMapError,
    StaleResponseDiscarded,
    UnauthorizedGesture,
)
from .interaction.collaborators import Collaborators, GestureContext
from .model.models import GeoPoint, LocationMarker, LocationType, MapBounds
from .viewport.widget import HeadlessMap

__all__ = [
    "MapConfig",
    "load_json",
    "MapController",
    "MapScene",
    "Collaborators",
    "GestureContext",
    "GeoPoint",
    "MapBounds",
    "LocationMarker",
    "LocationType",
    "HeadlessMap",
    "ShelterMapError",
    "MarkerLoadFailure",
    "StaleResponseDiscarded",
    "UnauthorizedGesture",
    "LocationDataError",
]
