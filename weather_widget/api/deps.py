from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from weather_widget.services.weather import WeatherOrchestrator


def get_orchestrator(request: Request) -> WeatherOrchestrator:
    return request.app.state.orchestrator


Orchestrator = Annotated[WeatherOrchestrator, Depends(get_orchestrator)]
