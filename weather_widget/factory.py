from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from weather_widget.api.router import api_router
from weather_widget.clients.openweather import OpenWeatherClient
from weather_widget.core.config import Settings, load_settings
from weather_widget.core.logging import configure_logging
from weather_widget.services.state import AppState
from weather_widget.services.weather import WeatherOrchestrator
from weather_widget.storage.base import KeyValueStore
from weather_widget.storage.file import JsonFileStore
from weather_widget.storage.memory import MemoryStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> KeyValueStore:
    if settings.store_path is None:
        return MemoryStore()
    return JsonFileStore(settings.store_path)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = OpenWeatherClient(
            api_key=settings.weather_api_key,
            base_url=str(settings.weather_base_url),
            timeout_seconds=settings.weather_timeout_seconds,
        )
        app.state.weather_client = client
        app.state.orchestrator = WeatherOrchestrator(
            state=AppState(city=settings.default_city, units=settings.default_units),
            client=client,
            store=create_store(settings),
            cache_ttl_seconds=settings.cache_ttl_seconds,
            history_limit=settings.history_limit,
            favorites_limit=settings.favorites_limit,
            request_deadline_seconds=settings.request_deadline_seconds,
        )
        if settings.initialize_on_startup:
            await app.state.orchestrator.initialize()
            logger.info("Initial lookup for %r finished", app.state.orchestrator.state.city)

        yield
        await client.aclose()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Weather Widget API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "weather-widget", "status": "ok"}

    app.include_router(api_router)
    return app
