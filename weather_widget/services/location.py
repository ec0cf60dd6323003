from __future__ import annotations

from typing import Protocol

from weather_widget.core.errors import GeolocationError, GeolocationErrorKind
from weather_widget.models.weather import Coordinates


class LocationProvider(Protocol):
    async def current_position(self) -> Coordinates: ...


class ReportedPosition:
    """Position outcome reported by the client device (browser geolocation).

    Holds either coordinates or the platform error code the device produced.
    """

    def __init__(
        self,
        *,
        coords: Coordinates | None = None,
        error_code: int | None = None,
    ) -> None:
        if (coords is None) == (error_code is None):
            raise ValueError("ReportedPosition needs either coordinates or an error code")
        self._coords = coords
        self._error_code = error_code

    async def current_position(self) -> Coordinates:
        if self._coords is None:
            raise GeolocationError(GeolocationErrorKind.from_code(self._error_code))
        return self._coords
