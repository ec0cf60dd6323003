from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from weather_widget.models.weather import UnitSystem, WeatherSnapshot
from weather_widget.services.state import AppState
from weather_widget.utils.formatting import capitalize_first_letter, convert_pressure


class CitySearchRequest(BaseModel):
    # Blank input is accepted here and answered through error_message.
    city: str = Field(max_length=128)


class CoordinatesRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class LocateRequest(BaseModel):
    """Outcome of the browser's geolocation call.

    An empty body means the browser has no geolocation capability.
    """

    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)
    error_code: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def coords_come_in_pairs(self) -> LocateRequest:
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be given together")
        return self


class WeatherSnapshotOut(BaseModel):
    status: int
    city: str | None = None
    country: str | None = None
    temperature: float | None = None
    feels_like: float | None = None
    description: str | None = None
    summary: str | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    pressure: float | None = None
    pressure_mm: int | None = None
    icon: str | None = None


class ForecastEntryOut(BaseModel):
    time: str
    temperature: int
    feels_like: int
    description: str
    humidity: float
    wind_speed: float
    pop: int = Field(ge=0, le=100)
    icon: str | None = None


class WeatherStateResponse(BaseModel):
    city: str
    weather_info: WeatherSnapshotOut | None = None
    hourly_forecast: list[ForecastEntryOut] = Field(default_factory=list)
    forecast_points: int = Field(ge=0)
    is_loading: bool
    is_forecast_loading: bool
    error_message: str
    is_offline: bool
    units: UnitSystem
    search_history: list[str] = Field(default_factory=list)
    favorites: list[str] = Field(default_factory=list)
    is_error: bool
    is_celsius: bool
    is_favorited: bool

    @classmethod
    def from_state(cls, state: AppState) -> WeatherStateResponse:
        return cls(
            city=state.city,
            weather_info=_snapshot_out(state),
            hourly_forecast=[ForecastEntryOut.model_validate(e.__dict__) for e in state.hourly_forecast],
            forecast_points=len(state.forecast_info),
            is_loading=state.is_loading,
            is_forecast_loading=state.is_forecast_loading,
            error_message=state.error_message,
            is_offline=state.is_offline,
            units=state.units,
            search_history=list(state.search_history),
            favorites=list(state.favorites),
            is_error=state.is_error,
            is_celsius=state.is_celsius,
            is_favorited=state.is_favorited,
        )


def _snapshot_out(state: AppState) -> WeatherSnapshotOut | None:
    info = state.weather_info
    if info is None:
        return None
    if not isinstance(info, WeatherSnapshot):
        return WeatherSnapshotOut(status=info.status)
    return WeatherSnapshotOut(
        status=info.status,
        city=info.city,
        country=info.country,
        temperature=info.temperature,
        feels_like=info.feels_like,
        description=info.description,
        summary=capitalize_first_letter(info.description),
        humidity=info.humidity,
        wind_speed=info.wind_speed,
        pressure=info.pressure,
        pressure_mm=convert_pressure(info.pressure) if info.pressure is not None else None,
        icon=info.icon,
    )
