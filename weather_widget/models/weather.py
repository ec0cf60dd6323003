from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import TypeAdapter

STATUS_OK = 200
STATUS_FAILED = 404


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    def toggled(self) -> UnitSystem:
        return UnitSystem.IMPERIAL if self is UnitSystem.METRIC else UnitSystem.METRIC


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class WeatherSnapshot:
    city: str
    country: str
    temperature: float
    feels_like: float
    description: str
    humidity: float
    wind_speed: float
    pressure: float | None = None
    icon: str | None = None
    status: int = STATUS_OK

    @property
    def is_valid(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def from_dict(cls, data: Any) -> WeatherSnapshot:
        """Rebuild a snapshot from its ``asdict`` form.

        Raises pydantic's ``ValidationError`` when fields are missing or of
        the wrong type.
        """
        return _snapshot_adapter.validate_python(data)


@dataclass(frozen=True)
class FailedSnapshot:
    """Placeholder published after a failed lookup; never a valid snapshot."""

    status: int = STATUS_FAILED

    @property
    def is_valid(self) -> bool:
        return False


FAILED_SNAPSHOT = FailedSnapshot()


@dataclass(frozen=True)
class ForecastPoint:
    timestamp: int
    temperature: float
    feels_like: float
    description: str
    humidity: float
    wind_speed: float
    pop: float = 0.0
    icon: str | None = None


@dataclass(frozen=True)
class ForecastSeries:
    points: tuple[ForecastPoint, ...] = ()
    # Seconds east of UTC for the forecast location.
    timezone_offset: int = 0

    def __len__(self) -> int:
        return len(self.points)

    @classmethod
    def from_dict(cls, data: Any) -> ForecastSeries:
        return _series_adapter.validate_python(data)


EMPTY_FORECAST = ForecastSeries()


@dataclass(frozen=True)
class ForecastEntry:
    time: str
    temperature: int
    feels_like: int
    description: str
    humidity: float
    wind_speed: float
    pop: int
    icon: str | None = None


_snapshot_adapter = TypeAdapter(WeatherSnapshot)
_series_adapter = TypeAdapter(ForecastSeries)
