from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from oceanguard.schemas.base import CamelModel

AlertCategory = Literal["weather", "tsunami", "earthquake"]
AlertSource = Literal["NOAA", "USGS"]


class Coordinates(BaseModel):
    lat: float
    lng: float


class NormalizedAlert(CamelModel):
    id: str
    category: AlertCategory
    source: AlertSource
    title: str
    severity_label: str
    description: str
    location_label: str
    coordinates: Optional[Coordinates] = None
    observed_at: datetime
    expires_at: Optional[datetime] = None
    details_url: Optional[str] = None
    instruction: Optional[str] = None

    @field_validator("observed_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Feeds occasionally omit the offset; keep every timestamp comparable
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class AlertSummary(CamelModel):
    total: int = 0
    weather: int = 0
    tsunami: int = 0
    earthquake: int = 0


class AlertsResult(CamelModel):
    alerts: List[NormalizedAlert] = Field(default_factory=list)
    summary: AlertSummary = Field(default_factory=AlertSummary)


class GovernmentAlertsResponse(CamelModel):
    message: str
    data: List[NormalizedAlert]
    summary: AlertSummary
    last_updated: datetime
