from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError as PayloadValidationError

from weather_widget.core.errors import ApiError, HttpError, NetworkError
from weather_widget.models.weather import (
    Coordinates,
    ForecastSeries,
    UnitSystem,
    WeatherSnapshot,
)
from weather_widget.schemas.openweather import CurrentWeatherPayload, ForecastPayload

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"


class OpenWeatherClient:
    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str = OPENWEATHER_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def current_by_city(self, city: str, *, units: UnitSystem) -> WeatherSnapshot:
        payload = await self._get("weather", {"q": city, "units": units.value})
        return decode_current(payload)

    async def current_by_coords(
        self, coords: Coordinates, *, units: UnitSystem
    ) -> WeatherSnapshot:
        payload = await self._get(
            "weather", {"lat": coords.lat, "lon": coords.lon, "units": units.value}
        )
        return decode_current(payload)

    async def forecast_by_city(self, city: str, *, units: UnitSystem) -> ForecastSeries:
        payload = await self._get("forecast", {"q": city, "units": units.value})
        return decode_forecast(payload)

    async def forecast_by_coords(
        self, coords: Coordinates, *, units: UnitSystem
    ) -> ForecastSeries:
        payload = await self._get(
            "forecast", {"lat": coords.lat, "lon": coords.lon, "units": units.value}
        )
        return decode_forecast(payload)

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.get(path, params={**params, "appid": self._api_key})
        except httpx.TransportError as e:
            raise NetworkError(f"Failed to fetch {path}: {e}") from e

        if resp.is_error:
            raise _http_error(resp)

        try:
            payload = resp.json()
        except ValueError as e:
            raise ApiError("Weather API returned malformed JSON") from e
        if not isinstance(payload, dict):
            raise ApiError("Unexpected weather API response shape")
        return payload


def decode_current(payload: Mapping[str, Any]) -> WeatherSnapshot:
    if payload.get("cod") != 200:
        raise ApiError(
            str(payload.get("message") or "City not found"),
            status_code=_int_or_none(payload.get("cod")),
        )
    try:
        body = CurrentWeatherPayload.model_validate(payload)
    except PayloadValidationError as e:
        logger.warning("Current weather payload failed validation: %s", e)
        raise ApiError("Unexpected weather API response shape") from e
    return body.to_snapshot()


def decode_forecast(payload: Mapping[str, Any], *, require_ok: bool = True) -> ForecastSeries:
    if require_ok and payload.get("cod") != "200":
        raise ApiError(
            str(payload.get("message") or "Failed to fetch forecast"),
            status_code=_int_or_none(payload.get("cod")),
        )
    try:
        body = ForecastPayload.model_validate(payload)
    except PayloadValidationError as e:
        logger.warning("Forecast payload failed validation: %s", e)
        raise ApiError("Unexpected forecast API response shape") from e
    return body.to_series()


def _http_error(resp: httpx.Response) -> HttpError:
    message = f"HTTP error! status: {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = f"{message} ({body['message']})"
    return HttpError(message, status_code=resp.status_code)


def _int_or_none(v: Any) -> int | None:
    try:
        if v is None:
            return None
        return int(v)
    except (TypeError, ValueError):
        return None
