"""Sources of device coordinates."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mylook.errors import MyLookError
from mylook.models import Coordinates


class LocationUnavailable(MyLookError):
    """Raised when the device cannot or will not report its position."""


class DeviceLocator(ABC):
    """Reports the device position."""

    @abstractmethod
    async def locate(self) -> Coordinates:
        """Return current coordinates or raise :class:`LocationUnavailable`."""


class StaticLocator(DeviceLocator):
    """Coordinates fixed by configuration."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._coordinates = Coordinates(latitude=latitude, longitude=longitude)

    async def locate(self) -> Coordinates:
        return self._coordinates


class UnavailableLocator(DeviceLocator):
    """Used when no position source is configured."""

    async def locate(self) -> Coordinates:
        raise LocationUnavailable("Geolocation unavailable")


def locator_from_settings(latitude: float | None, longitude: float | None) -> DeviceLocator:
    if latitude is None or longitude is None:
        return UnavailableLocator()
    return StaticLocator(latitude, longitude)
