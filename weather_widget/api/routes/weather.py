from __future__ import annotations

from collections.abc import Awaitable
from typing import Any

from fastapi import APIRouter, HTTPException, status

from weather_widget.api.deps import Orchestrator
from weather_widget.models.weather import Coordinates
from weather_widget.schemas.weather import (
    CitySearchRequest,
    CoordinatesRequest,
    LocateRequest,
    WeatherStateResponse,
)
from weather_widget.services.location import ReportedPosition

router = APIRouter(prefix="/weather")


async def _run(orchestrator: Orchestrator, action: Awaitable[Any] | None = None) -> WeatherStateResponse:
    try:
        if action is not None:
            await action
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Local store unavailable",
        ) from e
    return WeatherStateResponse.from_state(orchestrator.state)


@router.get("/state", response_model=WeatherStateResponse)
async def get_state(orchestrator: Orchestrator) -> WeatherStateResponse:
    return await _run(orchestrator)


@router.post("/search", response_model=WeatherStateResponse)
async def search(payload: CitySearchRequest, orchestrator: Orchestrator) -> WeatherStateResponse:
    return await _run(orchestrator, orchestrator.fetch_weather_by_city(payload.city))


@router.post("/coords", response_model=WeatherStateResponse)
async def search_by_coords(
    payload: CoordinatesRequest, orchestrator: Orchestrator
) -> WeatherStateResponse:
    return await _run(orchestrator, orchestrator.fetch_weather_by_coords(payload.lat, payload.lon))


@router.post("/locate", response_model=WeatherStateResponse)
async def locate(payload: LocateRequest, orchestrator: Orchestrator) -> WeatherStateResponse:
    locator: ReportedPosition | None = None
    if payload.error_code is not None:
        locator = ReportedPosition(error_code=payload.error_code)
    elif payload.lat is not None and payload.lon is not None:
        locator = ReportedPosition(coords=Coordinates(lat=payload.lat, lon=payload.lon))
    return await _run(orchestrator, orchestrator.locate_and_fetch(locator))


@router.post("/refresh", response_model=WeatherStateResponse)
async def refresh(orchestrator: Orchestrator) -> WeatherStateResponse:
    return await _run(orchestrator, orchestrator.refresh())


@router.post("/units/toggle", response_model=WeatherStateResponse)
async def toggle_units(orchestrator: Orchestrator) -> WeatherStateResponse:
    return await _run(orchestrator, orchestrator.toggle_unit_system())


@router.post("/favorites/toggle", response_model=WeatherStateResponse)
async def toggle_favorite(orchestrator: Orchestrator) -> WeatherStateResponse:
    try:
        orchestrator.toggle_favorite()
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Local store unavailable",
        ) from e
    return WeatherStateResponse.from_state(orchestrator.state)
