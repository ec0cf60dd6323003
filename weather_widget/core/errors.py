from __future__ import annotations

from enum import IntEnum


class WeatherError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(WeatherError):
    """Raised for user input that cannot be looked up (an empty city)."""


class NetworkError(WeatherError):
    """The request never produced a response: connectivity or a missed deadline."""


class HttpError(WeatherError):
    """Non-2xx response from the weather API."""


class ApiError(WeatherError):
    """A response arrived but the API reported failure or its shape was wrong."""


class GeolocationErrorKind(IntEnum):
    # Codes follow the browser GeolocationPositionError numbering.
    UNKNOWN = 0
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    @classmethod
    def from_code(cls, code: int | None) -> GeolocationErrorKind:
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


GEOLOCATION_MESSAGES: dict[GeolocationErrorKind, str] = {
    GeolocationErrorKind.PERMISSION_DENIED: "Location permission denied",
    GeolocationErrorKind.POSITION_UNAVAILABLE: "Location information unavailable",
    GeolocationErrorKind.TIMEOUT: "Location request timed out",
    GeolocationErrorKind.UNKNOWN: "An unknown error occurred",
}


class GeolocationError(WeatherError):
    def __init__(self, kind: GeolocationErrorKind, message: str | None = None) -> None:
        super().__init__(message or GEOLOCATION_MESSAGES[kind])
        self.kind = kind

    @property
    def user_message(self) -> str:
        return GEOLOCATION_MESSAGES[self.kind]
