from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from weather_widget.models.weather import (
    STATUS_OK,
    ForecastPoint,
    ForecastSeries,
    WeatherSnapshot,
)


class MainBlock(BaseModel):
    temp: float
    feels_like: float
    humidity: float
    pressure: float | None = None


class ConditionBlock(BaseModel):
    description: str = ""
    icon: str | None = None


class WindBlock(BaseModel):
    speed: float = 0.0


class SysBlock(BaseModel):
    country: str = ""


class CurrentWeatherPayload(BaseModel):
    cod: int
    name: str
    sys: SysBlock = Field(default_factory=SysBlock)
    main: MainBlock
    weather: list[ConditionBlock] = Field(min_length=1)
    wind: WindBlock = Field(default_factory=WindBlock)

    def to_snapshot(self) -> WeatherSnapshot:
        condition = self.weather[0]
        return WeatherSnapshot(
            city=self.name,
            country=self.sys.country,
            temperature=self.main.temp,
            feels_like=self.main.feels_like,
            description=condition.description,
            humidity=self.main.humidity,
            wind_speed=self.wind.speed,
            pressure=self.main.pressure,
            icon=condition.icon,
            status=STATUS_OK,
        )


class ForecastItemPayload(BaseModel):
    dt: int
    main: MainBlock
    weather: list[ConditionBlock] = Field(min_length=1)
    wind: WindBlock = Field(default_factory=WindBlock)
    pop: float = Field(default=0.0, ge=0.0, le=1.0)

    def to_point(self) -> ForecastPoint:
        condition = self.weather[0]
        return ForecastPoint(
            timestamp=self.dt,
            temperature=self.main.temp,
            feels_like=self.main.feels_like,
            description=condition.description,
            humidity=self.main.humidity,
            wind_speed=self.wind.speed,
            pop=self.pop,
            icon=condition.icon,
        )


class ForecastCityBlock(BaseModel):
    name: str = ""
    timezone: int = 0


class ForecastPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # The forecast endpoint reports "cod" as a string, unlike current conditions.
    cod: int | str | None = None
    items: list[ForecastItemPayload] | None = Field(default=None, alias="list")
    city: ForecastCityBlock | None = None

    def to_series(self) -> ForecastSeries:
        return ForecastSeries(
            points=tuple(item.to_point() for item in self.items or ()),
            timezone_offset=self.city.timezone if self.city else 0,
        )
