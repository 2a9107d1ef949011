"""
Memory Map — Map Rendering Surface
====================================

What:  The tile map the view draws on, and the observer that keeps its
       centre in sync with the location state.
How:   MapSurface is the port; LeafletPage renders a self-contained Leaflet
       HTML document over OpenStreetMap tiles.

Recentring:
    A surface takes its centre and zoom once, at construction. Later
    location changes (geolocation resolving after the first render) reach it
    only through RecenterObserver, which issues set_view() whenever the
    location slice of the state changes.
"""

import html
import json
from abc import ABC, abstractmethod
from string import Template
from typing import Any, Dict, List

from memorymap.mapview.state import Location, MapViewState

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)
LEAFLET_VERSION = "1.9.4"

_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>$title</title>
<link rel="stylesheet" href="https://unpkg.com/leaflet@$leaflet/dist/leaflet.css">
<style>html, body, #map { height: 100%; margin: 0; }</style>
</head>
<body>
<div id="map" class="map"></div>
<script src="https://unpkg.com/leaflet@$leaflet/dist/leaflet.js"></script>
<script>
const view = $view;
const markers = $markers;
const map = L.map("map").setView([view.lat, view.lng], view.zoom);
L.tileLayer($tile_url, {attribution: $attribution}).addTo(map);
for (const m of markers) {
  const marker = L.marker([m.lat, m.lng]).addTo(map);
  if (m.popup) { marker.bindPopup(m.popup, {autoClose: false}); }
}
</script>
</body>
</html>
""")


def _script_json(value: Any) -> str:
    """JSON safe to inline inside a <script> element."""
    return json.dumps(value).replace("</", "<\\/")


class MapSurface(ABC):
    """Port for whatever draws the map."""

    @abstractmethod
    def set_view(self, lat: float, lng: float, zoom: int) -> None:
        """Move the map to a new centre and zoom."""
        ...

    @abstractmethod
    def render(self, state: MapViewState) -> str:
        """Draw the state's markers at the surface's current view."""
        ...


class LeafletPage(MapSurface):
    """Renders the map view as a standalone Leaflet HTML page."""

    def __init__(self, center: Location, title: str = "Memory Map"):
        self.initial_view = center
        self.view = center
        self.title = title

    def set_view(self, lat: float, lng: float, zoom: int) -> None:
        self.view = Location(lat=lat, lng=lng, zoom=zoom)

    def markers(self, state: MapViewState) -> List[Dict[str, Any]]:
        """User marker (when known) followed by one marker per message."""
        markers: List[Dict[str, Any]] = []
        if state.has_user_location:
            markers.append({
                "lat": state.location.lat,
                "lng": state.location.lng,
                "popup": None,
            })
        for message in state.messages:
            markers.append({
                "id": str(message.id),
                "lat": message.latitude,
                "lng": message.longitude,
                "popup": f"<em>{html.escape(message.name)}:</em> {html.escape(message.message)}",
            })
        return markers

    def render(self, state: MapViewState) -> str:
        return _PAGE.substitute(
            title=html.escape(self.title),
            leaflet=LEAFLET_VERSION,
            view=_script_json({"lat": self.view.lat, "lng": self.view.lng, "zoom": self.view.zoom}),
            markers=_script_json(self.markers(state)),
            tile_url=_script_json(TILE_URL),
            attribution=_script_json(TILE_ATTRIBUTION),
        )


class RecenterObserver:
    """Store listener that re-centres a surface whenever the location changes."""

    def __init__(self, surface: MapSurface):
        self._surface = surface

    def __call__(self, previous: MapViewState, current: MapViewState) -> None:
        if current.location != previous.location:
            location = current.location
            self._surface.set_view(location.lat, location.lng, location.zoom)
