"""
Memory Map — User Location Acquisition
========================================

What:  Finds where the visitor is so their marker can be shown and their
       message can be placed.
How:   Device geolocation first; on failure or absence, an IP-geolocation
       lookup (ipapi.co by default) over httpx; if both fail, no location.

Policy:
    device ok                    → device position
    device denied / unsupported  → IP lookup
    device error or bad fix      → IP lookup
    IP lookup fails              → None (marker hidden, submit disabled)

A missing location is a degraded state, not an error: resolve() never raises
GeolocationUnavailable to its caller.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

import httpx

from memorymap.config import settings

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


class GeolocationUnavailable(Exception):
    """A location source could not produce a position."""


class DeviceGeolocator(ABC):
    """
    Port for the device's own positioning (browser geolocation, GPS, ...).

    Implementations raise GeolocationUnavailable when the user denies access
    or the device cannot determine a position.
    """

    @abstractmethod
    async def current_position(self) -> Position:
        """Return (latitude, longitude) in degrees."""
        ...


def _coordinate(value: Any, key: str, bound: float, source: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GeolocationUnavailable(f"{source} gave no numeric '{key}'")
    value = float(value)
    if not math.isfinite(value) or not -bound <= value <= bound:
        raise GeolocationUnavailable(f"{source} '{key}' out of range: {value}")
    return value


def checked_position(latitude: Any, longitude: Any, source: str) -> Position:
    """Both coordinates as floats within WGS84 bounds, or GeolocationUnavailable."""
    return (
        _coordinate(latitude, "latitude", 90, source),
        _coordinate(longitude, "longitude", 180, source),
    )


class IpGeolocator:
    """Estimates the visitor's position from their IP address."""

    def __init__(self, client: httpx.AsyncClient, url: Optional[str] = None):
        self._client = client
        self._url = url or settings.ip_geolocation_url

    async def locate(self) -> Position:
        """
        Raises:
            GeolocationUnavailable: network failure, non-2xx status, a body that
                is not JSON, or an ipapi error payload ({"error": true, ...}).
        """
        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GeolocationUnavailable(f"IP geolocation request failed: {e}") from e

        if not isinstance(payload, dict):
            raise GeolocationUnavailable("IP geolocation response is not a JSON object")
        if payload.get("error"):
            raise GeolocationUnavailable(
                f"IP geolocation refused: {payload.get('reason', 'unknown reason')}"
            )

        return checked_position(payload.get("latitude"), payload.get("longitude"), "IP geolocation")


class LocationResolver:
    """Applies the device-then-IP acquisition policy."""

    def __init__(self, ip_geolocator: IpGeolocator, device: Optional[DeviceGeolocator] = None):
        self._ip = ip_geolocator
        self._device = device

    async def resolve(self) -> Optional[Position]:
        if self._device is None:
            logger.info("Device geolocation is not supported; estimating from IP address")
        else:
            position = await self._device_position()
            if position is not None:
                return position

        try:
            position = await self._ip.locate()
        except GeolocationUnavailable as e:
            logger.warning("Could not determine user location: %s", e)
            return None

        logger.info("Estimated user location from IP: (%.4f, %.4f)", *position)
        return position

    async def _device_position(self) -> Optional[Position]:
        """The device's fix, or None when it is denied, broken or out of range."""
        try:
            latitude, longitude = await self._device.current_position()
            return checked_position(latitude, longitude, "Device geolocation")
        except GeolocationUnavailable as e:
            logger.info("User did not provide location (%s); estimating from IP address", e)
        except Exception as e:
            logger.warning(
                "Device geolocation failed (%s: %s); estimating from IP address",
                type(e).__name__, e,
            )
        return None
