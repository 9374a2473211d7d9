from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException

from oceanguard.api.deps import get_government_alert_service, get_ocean_weather_service
from oceanguard.schemas.alerts import GovernmentAlertsResponse
from oceanguard.schemas.weather import MarineForecast, OceanWeather
from oceanguard.services.government_alerts import GovernmentAlertService
from oceanguard.services.ocean_weather import OceanWeatherService

router = APIRouter(tags=["government-alerts"])


def _coordinates(lat: Optional[str], lng: Optional[str]) -> Tuple[float, float]:
    if not lat or not lng:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    try:
        return float(lat), float(lng)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid coordinates")


@router.get("/government-alerts", response_model=GovernmentAlertsResponse)
async def get_government_alerts(
    service: GovernmentAlertService = Depends(get_government_alert_service),
) -> GovernmentAlertsResponse:
    """
    Active marine NOAA alerts and relevant USGS earthquakes, newest first.
    """
    result = await service.get_all_alerts()
    return GovernmentAlertsResponse(
        message="Government alerts retrieved successfully",
        data=result.alerts,
        summary=result.summary,
        last_updated=datetime.now(timezone.utc),
    )


@router.get("/government-alerts/weather", response_model=OceanWeather)
async def get_weather_at_location(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    service: OceanWeatherService = Depends(get_ocean_weather_service),
) -> OceanWeather:
    latitude, longitude = _coordinates(lat, lng)
    weather = await service.get_ocean_weather(latitude, longitude)
    if weather is None:
        raise HTTPException(status_code=500, detail="Unable to fetch weather data")
    return weather


@router.get("/government-alerts/forecast", response_model=MarineForecast)
async def get_forecast_at_location(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    service: OceanWeatherService = Depends(get_ocean_weather_service),
) -> MarineForecast:
    latitude, longitude = _coordinates(lat, lng)
    forecast = await service.get_marine_forecast(latitude, longitude)
    if forecast is None:
        raise HTTPException(status_code=500, detail="Unable to fetch forecast data")
    return forecast
