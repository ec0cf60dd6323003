from __future__ import annotations

from dataclasses import dataclass, field

from weather_widget.models.weather import (
    EMPTY_FORECAST,
    FailedSnapshot,
    ForecastEntry,
    ForecastSeries,
    UnitSystem,
    WeatherSnapshot,
)

DEFAULT_CITY = "Kauniainen"


@dataclass
class AppState:
    """Everything the presentation layer observes.

    Owned by the caller and handed to the orchestrator, which is the only
    writer. Request ids sequence overlapping lookups: a response may commit
    only while its id is still the latest one issued for its family.
    """

    city: str = DEFAULT_CITY
    weather_info: WeatherSnapshot | FailedSnapshot | None = None
    forecast_info: ForecastSeries = EMPTY_FORECAST
    hourly_forecast: list[ForecastEntry] = field(default_factory=list)
    is_loading: bool = False
    is_forecast_loading: bool = False
    error_message: str = ""
    is_offline: bool = False
    units: UnitSystem = UnitSystem.METRIC
    search_history: list[str] = field(default_factory=list)
    favorites: list[str] = field(default_factory=list)

    _weather_request_id: int = field(default=0, init=False, repr=False)
    _forecast_request_id: int = field(default=0, init=False, repr=False)
    _weather_request_pending: bool = field(default=False, init=False, repr=False)

    @property
    def has_snapshot(self) -> bool:
        return self.weather_info is not None and self.weather_info.is_valid

    @property
    def is_error(self) -> bool:
        return not self.has_snapshot

    @property
    def is_celsius(self) -> bool:
        return self.units is UnitSystem.METRIC

    @property
    def is_favorited(self) -> bool:
        info = self.weather_info
        return isinstance(info, WeatherSnapshot) and info.is_valid and info.city in self.favorites

    @property
    def weather_request_pending(self) -> bool:
        """True while the latest weather lookup has not finished."""
        return self._weather_request_pending

    def begin_weather_request(self) -> int:
        self._weather_request_id += 1
        self._weather_request_pending = True
        return self._weather_request_id

    def is_latest_weather_request(self, request_id: int) -> bool:
        return request_id == self._weather_request_id

    def finish_weather_request(self, request_id: int) -> bool:
        """Mark a lookup finished; returns whether it was still the latest."""
        if not self.is_latest_weather_request(request_id):
            return False
        self._weather_request_pending = False
        return True

    def begin_forecast_request(self) -> int:
        self._forecast_request_id += 1
        return self._forecast_request_id

    def is_latest_forecast_request(self, request_id: int) -> bool:
        return request_id == self._forecast_request_id
