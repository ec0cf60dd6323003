from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any

import httpx

from weather_widget.core.errors import GeolocationError, GeolocationErrorKind
from weather_widget.models.weather import Coordinates

TEST_BASE_URL = "https://api.test/data/2.5"
BASE_TS = 1_760_000_400  # 2025-10-09 09:00:00 UTC


def current_payload(
    name: str = "Helsinki",
    *,
    country: str = "FI",
    temp: float = 15.5,
    feels_like: float = 14.2,
    description: str = "clear sky",
    pressure: float = 1013.0,
) -> dict[str, Any]:
    return {
        "cod": 200,
        "name": name,
        "sys": {"country": country},
        "main": {
            "temp": temp,
            "feels_like": feels_like,
            "humidity": 71,
            "pressure": pressure,
        },
        "weather": [{"description": description, "icon": "01d"}],
        "wind": {"speed": 3.6},
    }


def forecast_item(index: int, *, temp: float = 10.4, pop: float = 0.42) -> dict[str, Any]:
    return {
        "dt": BASE_TS + index * 3 * 3600,
        "main": {"temp": temp + index, "feels_like": temp + index - 1.6, "humidity": 80},
        "weather": [{"description": "light rain", "icon": "10d"}],
        "wind": {"speed": 4.1},
        "pop": pop,
    }


def forecast_payload(count: int = 10, *, timezone: int = 0) -> dict[str, Any]:
    return {
        "cod": "200",
        "cnt": count,
        "list": [forecast_item(i) for i in range(count)],
        "city": {"name": "Helsinki", "timezone": timezone},
    }


class FakeOpenWeatherApi:
    """httpx handler standing in for the OpenWeather current/forecast endpoints.

    Responses can be overridden per city, and per-city gates hold a request
    open until the test releases it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.current: dict[str, httpx.Response | Exception] = {}
        self.forecast: dict[str, httpx.Response | Exception] = {}
        self.by_coords_name = "Espoo"
        self._gates: dict[tuple[str, str | None], asyncio.Event] = {}
        self._arrived: dict[tuple[str, str | None], asyncio.Event] = defaultdict(asyncio.Event)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def hold(self, city: str, endpoint: str | None = None) -> asyncio.Event:
        """Hold requests for ``city`` open, optionally only on one endpoint."""
        gate = asyncio.Event()
        self._gates[(city, endpoint)] = gate
        return gate

    def arrived(self, city: str, endpoint: str | None = None) -> asyncio.Event:
        return self._arrived[(city, endpoint)]

    def count(self, endpoint: str) -> int:
        return sum(1 for path, _ in self.calls if path == endpoint)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        params = dict(request.url.params)
        self.calls.append((endpoint, params))

        city = params.get("q") or self.by_coords_name
        self._arrived[(city, None)].set()
        self._arrived[(city, endpoint)].set()
        gate = self._gates.get((city, endpoint)) or self._gates.get((city, None))
        if gate is not None:
            await gate.wait()

        overrides = self.current if endpoint == "weather" else self.forecast
        override = overrides.get(city)
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return override

        if endpoint == "weather":
            return httpx.Response(200, json=current_payload(city))
        return httpx.Response(200, json=forecast_payload())


class FakeLocator:
    def __init__(
        self,
        coords: Coordinates | None = None,
        kind: GeolocationErrorKind | None = None,
    ) -> None:
        self._coords = coords or Coordinates(lat=60.2055, lon=24.6559)
        self._kind = kind
        self.calls = 0

    async def current_position(self) -> Coordinates:
        self.calls += 1
        if self._kind is not None:
            raise GeolocationError(self._kind)
        return self._coords


class ManualClock:
    def __init__(self, start: float = 1_760_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
