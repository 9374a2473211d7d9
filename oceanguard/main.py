import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oceanguard.core.config import settings
from oceanguard.core.exceptions import AggregationError
from oceanguard.api.v1.endpoints.analytics import router as analytics_router
from oceanguard.api.v1.endpoints.government_alerts import router as government_alerts_router
from oceanguard.api.v1.endpoints.social_media import router as social_media_router
from oceanguard.services.government_alerts import GovernmentAlertService
from oceanguard.services.ocean_weather import OceanWeatherService
from oceanguard.services.report_analytics import ReportAnalyticsService
from oceanguard.services.report_store import InMemoryHazardReportStore
from oceanguard.services.social_analytics import SocialMediaService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    if settings.hazard_reports_file:
        store = InMemoryHazardReportStore.from_json_file(settings.hazard_reports_file)
    else:
        logger.warning("No hazard report file configured - local report counts will be empty")
        store = InMemoryHazardReportStore()

    client = httpx.AsyncClient()
    app.state.social_media_service = SocialMediaService.from_settings(store, settings, client=client)
    app.state.government_alert_service = GovernmentAlertService.from_settings(settings, client=client)
    app.state.ocean_weather_service = OceanWeatherService.from_settings(settings, client=client)
    app.state.report_analytics_service = ReportAnalyticsService(store)
    logger.info("OceanGuard services initialized")

    yield

    # Shutdown
    await client.aclose()
    logger.info("HTTP client closed")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(social_media_router, prefix="/api/v1")
app.include_router(government_alerts_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")


@app.exception_handler(AggregationError)
async def aggregation_error_handler(request: Request, exc: AggregationError) -> JSONResponse:
    logger.error(f"Aggregation failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to build analytics response", "message": str(exc)},
    )


@app.get("/health")
def health():
    return {"status": "ok"}
