from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import asdict
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from weather_widget.clients.openweather import OpenWeatherClient, decode_forecast
from weather_widget.core.errors import (
    ApiError,
    GeolocationError,
    GeolocationErrorKind,
    HttpError,
    NetworkError,
    ValidationError,
    WeatherError,
)
from weather_widget.models.weather import (
    EMPTY_FORECAST,
    FAILED_SNAPSHOT,
    Coordinates,
    ForecastEntry,
    ForecastSeries,
    WeatherSnapshot,
)
from weather_widget.services.location import LocationProvider
from weather_widget.services.state import AppState
from weather_widget.storage.base import KeyValueStore
from weather_widget.utils.formatting import format_clock_time, round_half_up, to_percent

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEATHER_CACHE_KEY = "weatherCache"
FORECAST_CACHE_KEY = "forecastCache"
CACHE_TIMESTAMP_KEY = "cacheTimestamp"
SEARCH_HISTORY_KEY = "weatherSearchHistory"
FAVORITES_KEY = "weatherFavorites"

HOURLY_FORECAST_LIMIT = 8

EMPTY_CITY_MESSAGE = "Enter the city name!"
NETWORK_MESSAGE = "Network error. Please check your internet connection."
CITY_NOT_FOUND_MESSAGE = "City not found. Please try another name."
SERVER_MESSAGE = "Server error. Please try again later."
CITY_FALLBACK_MESSAGE = "Failed to fetch weather data"
COORDS_FALLBACK_MESSAGE = "Failed to fetch weather data for your location"
GEOLOCATION_UNSUPPORTED_MESSAGE = "Geolocation is not supported by your browser"


def derive_hourly_forecast(
    data: ForecastSeries | Mapping[str, Any] | None,
) -> list[ForecastEntry]:
    """Turn the head of a forecast into display-ready hourly entries.

    Accepts a decoded series or a raw forecast payload. Missing or empty
    lists give an empty result; otherwise the first eight points are kept in
    order with temperatures rounded and precipitation probability in percent.
    """
    if data is None:
        return []
    if not isinstance(data, ForecastSeries):
        data = decode_forecast(data, require_ok=False)
    return [
        ForecastEntry(
            time=format_clock_time(p.timestamp, data.timezone_offset),
            temperature=round_half_up(p.temperature),
            feels_like=round_half_up(p.feels_like),
            description=p.description,
            humidity=p.humidity,
            wind_speed=p.wind_speed,
            pop=to_percent(p.pop),
            icon=p.icon,
        )
        for p in data.points[:HOURLY_FORECAST_LIMIT]
    ]


def describe_lookup_error(error: WeatherError, *, by_city: bool) -> str:
    if isinstance(error, NetworkError):
        return NETWORK_MESSAGE
    if by_city and isinstance(error, (ApiError, HttpError)):
        # OpenWeather reports an unknown city as HTTP 404 with this message,
        # in varying case, so the match covers HTTP errors and ignores case.
        if "city not found" in error.message.casefold():
            return CITY_NOT_FOUND_MESSAGE
    if isinstance(error, HttpError):
        return SERVER_MESSAGE
    if error.message:
        return error.message
    return CITY_FALLBACK_MESSAGE if by_city else COORDS_FALLBACK_MESSAGE


class WeatherOrchestrator:
    def __init__(
        self,
        *,
        state: AppState,
        client: OpenWeatherClient,
        store: KeyValueStore,
        locator: LocationProvider | None = None,
        cache_ttl_seconds: float = 30 * 60,
        history_limit: int = 5,
        favorites_limit: int = 10,
        request_deadline_seconds: float = 15.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._state = state
        self._client = client
        self._store = store
        self._locator = locator
        self._cache_ttl_ms = int(cache_ttl_seconds * 1000)
        self._history_limit = history_limit
        self._favorites_limit = favorites_limit
        self._deadline = request_deadline_seconds
        self._clock = clock

    @property
    def state(self) -> AppState:
        return self._state

    # -- startup ---------------------------------------------------------

    async def initialize(self) -> None:
        self.load_search_history()
        self.load_favorites()
        if self.load_cached_snapshot():
            self._state.is_offline = True
        # The cache only pre-populates the view; a live lookup always follows.
        await self.fetch_weather_by_city()

    def load_search_history(self) -> None:
        self._state.search_history = self._load_names(SEARCH_HISTORY_KEY)[: self._history_limit]

    def load_favorites(self) -> None:
        self._state.favorites = self._load_names(FAVORITES_KEY)[-self._favorites_limit :]

    # -- current conditions ----------------------------------------------

    async def fetch_weather_by_city(self, city: str | None = None) -> None:
        state = self._state
        if city is not None:
            state.city = city
        try:
            query = _require_city(state.city)
        except ValidationError as e:
            state.error_message = e.message
            return

        request_id = state.begin_weather_request()
        state.error_message = ""
        state.is_loading = True
        try:
            snapshot = await self._call(
                lambda: self._client.current_by_city(query, units=state.units)
            )
            if not state.is_latest_weather_request(request_id):
                logger.debug("Discarding stale weather response for %r", query)
                return
            state.weather_info = snapshot
            state.is_offline = False
            self.record_search(snapshot.city)
            await self._fetch_forecast(
                lambda: self._client.forecast_by_city(query, units=state.units),
                label=query,
                parent_request_id=request_id,
            )
        except WeatherError as e:
            if not state.is_latest_weather_request(request_id):
                logger.debug("Discarding stale weather failure for %r: %s", query, e)
                return
            logger.warning("Weather lookup for %r failed: %s", query, e)
            state.error_message = describe_lookup_error(e, by_city=True)
            state.weather_info = FAILED_SNAPSHOT
        finally:
            if state.finish_weather_request(request_id):
                state.is_loading = False

    async def fetch_weather_by_coords(self, lat: float, lon: float) -> None:
        state = self._state
        coords = Coordinates(lat=lat, lon=lon)
        request_id = state.begin_weather_request()
        state.error_message = ""
        state.is_loading = True
        try:
            snapshot = await self._call(
                lambda: self._client.current_by_coords(coords, units=state.units)
            )
            if not state.is_latest_weather_request(request_id):
                logger.debug("Discarding stale weather response for %s", coords)
                return
            state.weather_info = snapshot
            state.city = snapshot.city
            state.is_offline = False
            self.record_search(snapshot.city)
            await self._fetch_forecast(
                lambda: self._client.forecast_by_coords(coords, units=state.units),
                label=str(coords),
                parent_request_id=request_id,
            )
        except WeatherError as e:
            if not state.is_latest_weather_request(request_id):
                logger.debug("Discarding stale weather failure for %s: %s", coords, e)
                return
            logger.warning("Weather lookup for %s failed: %s", coords, e)
            state.error_message = describe_lookup_error(e, by_city=False)
            state.weather_info = FAILED_SNAPSHOT
        finally:
            if state.finish_weather_request(request_id):
                state.is_loading = False

    async def refresh(self) -> None:
        await self.fetch_weather_by_city()

    # -- forecast --------------------------------------------------------

    async def fetch_forecast_by_city(self, city: str) -> None:
        query = city.strip()
        await self._fetch_forecast(
            lambda: self._client.forecast_by_city(query, units=self._state.units),
            label=query,
        )

    async def fetch_forecast_by_coords(self, lat: float, lon: float) -> None:
        coords = Coordinates(lat=lat, lon=lon)
        await self._fetch_forecast(
            lambda: self._client.forecast_by_coords(coords, units=self._state.units),
            label=str(coords),
        )

    async def _fetch_forecast(
        self,
        fetch: Callable[[], Awaitable[ForecastSeries]],
        *,
        label: str,
        parent_request_id: int | None = None,
    ) -> None:
        state = self._state
        request_id = state.begin_forecast_request()

        def is_current() -> bool:
            if not state.is_latest_forecast_request(request_id):
                return False
            return parent_request_id is None or state.is_latest_weather_request(
                parent_request_id
            )

        state.is_forecast_loading = True
        try:
            series = await self._call(fetch)
        except WeatherError as e:
            if is_current():
                # Forecast failures degrade the forecast view only.
                logger.warning("Forecast lookup for %s failed: %s", label, e)
                state.forecast_info = EMPTY_FORECAST
                state.hourly_forecast = []
            return
        finally:
            if state.is_latest_forecast_request(request_id):
                state.is_forecast_loading = False

        if not is_current():
            logger.debug("Discarding stale forecast response for %s", label)
            return
        state.forecast_info = series
        state.hourly_forecast = derive_hourly_forecast(series)
        if isinstance(state.weather_info, WeatherSnapshot) and state.weather_info.is_valid:
            self._write_cache(state.weather_info, series)
        else:
            logger.debug("Not caching forecast for %s without a current snapshot", label)

    # -- user lists ------------------------------------------------------

    def record_search(self, city_name: str) -> None:
        if not city_name:
            return
        key = city_name.casefold()
        history = [city_name] + [
            c for c in self._state.search_history if c.casefold() != key
        ]
        self._state.search_history = history[: self._history_limit]
        self._store.set(SEARCH_HISTORY_KEY, json.dumps(self._state.search_history))

    def toggle_favorite(self) -> None:
        info = self._state.weather_info
        if not isinstance(info, WeatherSnapshot) or not info.is_valid:
            return
        if info.city in self._state.favorites:
            favorites = [c for c in self._state.favorites if c != info.city]
        else:
            favorites = (self._state.favorites + [info.city])[-self._favorites_limit :]
        self._state.favorites = favorites
        self._store.set(FAVORITES_KEY, json.dumps(favorites))

    async def toggle_unit_system(self) -> None:
        self._state.units = self._state.units.toggled()
        if self._state.has_snapshot:
            await self.fetch_weather_by_city()

    # -- geolocation -----------------------------------------------------

    async def locate_and_fetch(self, locator: LocationProvider | None = None) -> None:
        state = self._state
        locator = locator or self._locator
        if locator is None:
            state.error_message = GEOLOCATION_UNSUPPORTED_MESSAGE
            return

        state.is_loading = True
        state.error_message = ""
        try:
            coords = await asyncio.wait_for(locator.current_position(), timeout=self._deadline)
        except asyncio.TimeoutError:
            state.error_message = GeolocationError(GeolocationErrorKind.TIMEOUT).user_message
        except GeolocationError as e:
            logger.info("Location request failed: %s", e.kind.name)
            state.error_message = e.user_message
        else:
            await self.fetch_weather_by_coords(coords.lat, coords.lon)
            return
        # A lookup still in flight owns the loading flag.
        if not state.weather_request_pending:
            state.is_loading = False

    # -- cache -----------------------------------------------------------

    def load_cached_snapshot(self) -> bool:
        try:
            cached_weather = self._store.get(WEATHER_CACHE_KEY)
            cached_forecast = self._store.get(FORECAST_CACHE_KEY)
            timestamp = self._store.get(CACHE_TIMESTAMP_KEY)
            if not (cached_weather and cached_forecast and timestamp):
                return False

            age_ms = self._now_ms() - int(timestamp)
            if age_ms >= self._cache_ttl_ms:
                logger.debug("Weather cache expired (age %d ms)", age_ms)
                return False

            snapshot = WeatherSnapshot.from_dict(json.loads(cached_weather))
            series = ForecastSeries.from_dict(json.loads(cached_forecast))
            hourly = derive_hourly_forecast(series)
        except (PydanticValidationError, ValueError, TypeError, OverflowError, OSError):
            logger.warning("Failed to load cached weather data", exc_info=True)
            return False
        if not snapshot.is_valid or not snapshot.city.strip():
            logger.warning("Ignoring cached weather data without a usable city")
            return False

        self._state.weather_info = snapshot
        self._state.forecast_info = series
        self._state.hourly_forecast = hourly
        self._state.city = snapshot.city
        return True

    def _write_cache(self, snapshot: WeatherSnapshot, series: ForecastSeries) -> None:
        try:
            self._store.set(WEATHER_CACHE_KEY, json.dumps(asdict(snapshot)))
            self._store.set(FORECAST_CACHE_KEY, json.dumps(asdict(series)))
            self._store.set(CACHE_TIMESTAMP_KEY, str(self._now_ms()))
        except (OSError, TypeError, ValueError):
            logger.warning("Failed to cache weather data", exc_info=True)

    # -- helpers ---------------------------------------------------------

    async def _call(self, fetch: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(fetch(), timeout=self._deadline)
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request timed out after {self._deadline:g}s") from e

    def _load_names(self, key: str) -> list[str]:
        stored = self._store.get(key)
        if not stored:
            return []
        try:
            names = json.loads(stored)
        except ValueError:
            logger.warning("Ignoring unreadable %s entry in local store", key, exc_info=True)
            return []
        if not isinstance(names, list):
            logger.warning("Ignoring %s entry in local store: expected a list", key)
            return []
        return [n for n in names if isinstance(n, str) and n]

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)


def _require_city(city: str) -> str:
    query = city.strip()
    if not query:
        raise ValidationError(EMPTY_CITY_MESSAGE)
    return query
