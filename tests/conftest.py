from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from weather_widget.api import deps
from weather_widget.clients.openweather import OpenWeatherClient
from weather_widget.core.config import Settings
from weather_widget.factory import create_app
from weather_widget.services.state import AppState
from weather_widget.services.weather import WeatherOrchestrator
from weather_widget.storage.memory import MemoryStore
from tests.fakes import TEST_BASE_URL, FakeOpenWeatherApi, ManualClock


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        weather_api_key="test-api-key",
        weather_base_url=TEST_BASE_URL,
        weather_timeout_seconds=1.0,
        request_deadline_seconds=5.0,
        default_city="Helsinki",
        initialize_on_startup=False,
    )


@pytest.fixture()
def api() -> FakeOpenWeatherApi:
    return FakeOpenWeatherApi()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def state() -> AppState:
    return AppState(city="Helsinki")


@pytest.fixture()
def weather_client(api: FakeOpenWeatherApi) -> OpenWeatherClient:
    return OpenWeatherClient(
        api_key="test-api-key",
        base_url=TEST_BASE_URL,
        timeout_seconds=1.0,
        transport=api.transport(),
    )


@pytest.fixture()
def orchestrator(
    state: AppState,
    weather_client: OpenWeatherClient,
    store: MemoryStore,
    clock: ManualClock,
) -> WeatherOrchestrator:
    return WeatherOrchestrator(
        state=state,
        client=weather_client,
        store=store,
        clock=clock,
        request_deadline_seconds=5.0,
    )


@pytest.fixture()
def client(settings: Settings, orchestrator: WeatherOrchestrator) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    with TestClient(app) as client:
        yield client
