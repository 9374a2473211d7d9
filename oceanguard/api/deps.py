from fastapi import Request

from oceanguard.services.government_alerts import GovernmentAlertService
from oceanguard.services.ocean_weather import OceanWeatherService
from oceanguard.services.report_analytics import ReportAnalyticsService
from oceanguard.services.social_analytics import SocialMediaService


# Services are built once in the application lifespan and kept on app.state


def get_social_media_service(request: Request) -> SocialMediaService:
    return request.app.state.social_media_service


def get_government_alert_service(request: Request) -> GovernmentAlertService:
    return request.app.state.government_alert_service


def get_ocean_weather_service(request: Request) -> OceanWeatherService:
    return request.app.state.ocean_weather_service


def get_report_analytics_service(request: Request) -> ReportAnalyticsService:
    return request.app.state.report_analytics_service
