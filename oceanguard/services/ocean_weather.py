"""
Ocean weather via OpenWeatherMap (current conditions and 24h forecast).

Requires OPENWEATHER_API_KEY. Without it, or on any upstream failure, the
service returns None and the caller decides what to show.
See: https://openweathermap.org/api
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from oceanguard.core.config import Settings, settings as default_settings
from oceanguard.core.exceptions import UpstreamFetchError
from oceanguard.schemas.upstream import OpenWeatherCurrent, OpenWeatherForecast
from oceanguard.schemas.weather import (
    ForecastEntry,
    MarineForecast,
    OceanWeather,
    SeaConditions,
    Temperature,
    WeatherCondition,
    WeatherLocation,
    Wind,
)
from oceanguard.services.collectors import BaseCollector

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6
FORECAST_SLOTS = 8  # 8 x 3h = next 24 hours

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

# (upper bound km/h exclusive, condition, wave height, description)
SEA_STATE_TABLE = (
    (6, "Calm", "0-0.1m", "Sea like a mirror"),
    (12, "Light Air", "0.1-0.2m", "Ripples without crests"),
    (20, "Light Breeze", "0.2-0.5m", "Small wavelets"),
    (29, "Gentle Breeze", "0.5-1m", "Large wavelets, some crests"),
    (39, "Moderate Breeze", "1-2m", "Small waves, frequent white horses"),
    (50, "Fresh Breeze", "2-3m", "Moderate waves, many white horses"),
    (62, "Strong Breeze", "3-4m", "Large waves, white foam crests"),
    (75, "Near Gale", "4-5.5m", "Sea heaps up, foam streaks"),
    (89, "Gale", "5.5-7.5m", "High waves, dense foam"),
)
STORM = SeaConditions(condition="Storm", wave_height_range="7.5m+",
                      description="Very high waves, dangerous conditions")


def round_half_up(value: float) -> int:
    # Halves round towards +inf (2.5 -> 3, -2.5 -> -2), unlike round()
    return math.floor(value + 0.5)


def wind_direction(degrees: float) -> str:
    index = round_half_up(degrees / 22.5) % 16
    return COMPASS_POINTS[index]


def sea_conditions(wind_speed_kmh: float) -> SeaConditions:
    for upper, condition, waves, description in SEA_STATE_TABLE:
        if wind_speed_kmh < upper:
            return SeaConditions(condition=condition, wave_height_range=waves, description=description)
    return STORM


def _kmh(speed_ms: float) -> int:
    return round_half_up(speed_ms * MS_TO_KMH)


class OceanWeatherService(BaseCollector):
    source = "OpenWeatherMap"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openweathermap.org/data/2.5",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(user_agent="OceanGuard-App/1.0", timeout=timeout, client=client)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "OceanWeatherService":
        return cls(
            api_key=settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout=settings.weather_timeout_seconds,
            client=client,
        )

    def _params(self, lat: float, lng: float, **extra) -> dict:
        return {"lat": lat, "lon": lng, "appid": self.api_key, "units": "metric", **extra}

    async def get_ocean_weather(self, lat: float, lng: float) -> Optional[OceanWeather]:
        if not self.api_key:
            logger.warning("OpenWeatherMap API key not configured")
            return None

        try:
            payload = await self._get_json(f"{self.base_url}/weather", params=self._params(lat, lng))
            data = OpenWeatherCurrent.model_validate(payload)
        except (UpstreamFetchError, ValidationError) as e:
            logger.error(f"Error fetching ocean weather: {e}")
            return None

        condition = data.weather[0] if data.weather else None
        wind_kmh = _kmh(data.wind.speed)
        return OceanWeather(
            location=WeatherLocation(lat=lat, lng=lng, name=data.name or "Ocean Location"),
            weather=WeatherCondition(
                description=condition.description if condition else "Unknown",
                icon=condition.icon if condition else "01d",
                main=condition.main if condition else "Clear",
            ),
            temperature=Temperature(
                current=round_half_up(data.main.temp),
                feels_like=round_half_up(data.main.feels_like),
                min=round_half_up(data.main.temp_min),
                max=round_half_up(data.main.temp_max),
            ),
            wind=Wind(
                speed=wind_kmh,
                direction=round_half_up(data.wind.deg),
                gust=_kmh(data.wind.gust) if data.wind.gust else None,
                compass_direction=wind_direction(data.wind.deg),
            ),
            visibility=data.visibility or 10000,
            humidity=data.main.humidity,
            pressure=data.main.pressure,
            timestamp=datetime.now(timezone.utc),
            sea_conditions=sea_conditions(wind_kmh),
        )

    async def get_marine_forecast(self, lat: float, lng: float) -> Optional[MarineForecast]:
        if not self.api_key:
            logger.warning("OpenWeatherMap API key not configured")
            return None

        try:
            payload = await self._get_json(
                f"{self.base_url}/forecast", params=self._params(lat, lng, cnt=FORECAST_SLOTS))
            data = OpenWeatherForecast.model_validate(payload)
        except (UpstreamFetchError, ValidationError) as e:
            logger.error(f"Error fetching marine forecast: {e}")
            return None

        forecasts = [
            ForecastEntry(
                timestamp=item.dt_txt,
                temperature=round_half_up(item.main.temp),
                weather=item.weather[0].description if item.weather else None,
                wind_speed=_kmh(item.wind.speed),
                wind_direction=round_half_up(item.wind.deg),
                humidity=item.main.humidity,
                rain=item.rain.get("3h", 0.0),
            )
            for item in data.items
        ]
        return MarineForecast(location=WeatherLocation(lat=lat, lng=lng), forecasts=forecasts)
