from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from oceanguard.schemas.base import CamelModel


class WeatherLocation(BaseModel):
    lat: float
    lng: float
    name: Optional[str] = None


class WeatherCondition(BaseModel):
    description: str
    icon: str
    main: str


class Temperature(CamelModel):
    current: int
    feels_like: int
    min: int
    max: int


class Wind(CamelModel):
    speed: int  # km/h
    direction: int  # degrees
    gust: Optional[int] = None
    compass_direction: Optional[str] = None


class SeaConditions(CamelModel):
    condition: str
    wave_height_range: str
    description: str


class OceanWeather(CamelModel):
    location: WeatherLocation
    weather: WeatherCondition
    temperature: Temperature
    wind: Wind
    visibility: int
    humidity: int
    pressure: int
    timestamp: datetime
    sea_conditions: Optional[SeaConditions] = None


class ForecastEntry(CamelModel):
    timestamp: str
    temperature: int
    weather: Optional[str] = None
    wind_speed: int
    wind_direction: int
    humidity: int
    rain: float = 0.0


class MarineForecast(BaseModel):
    location: WeatherLocation
    forecasts: List[ForecastEntry]
