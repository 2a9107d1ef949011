"""
Memory Map — Map View
=======================

Client side of the system: the visitor's map, their draft, and the
synchronisation between geolocation, form validity and the map surface.

Modules:
    state       immutable MapViewState, actions, reduce(), form_is_valid()
    store       MapViewStore: dispatch + subscribers
    location    device-then-IP location acquisition
    api_client  httpx client for /api/v1/messages, api_base_url()
    surface     MapSurface port, LeafletPage, RecenterObserver
    view        MapView controller and open_map_view()
"""

from memorymap.mapview.state import DEFAULT_LOCATION, Location, LocationStatus, MapViewState
from memorymap.mapview.view import MapView, open_map_view

__all__ = [
    "DEFAULT_LOCATION",
    "Location",
    "LocationStatus",
    "MapView",
    "MapViewState",
    "open_map_view",
]
