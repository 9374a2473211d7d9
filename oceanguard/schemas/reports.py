from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from oceanguard.schemas.alerts import Coordinates
from oceanguard.schemas.base import CamelModel

HazardType = Literal["Oil Spill", "Debris", "Pollution", "Other"]


class HazardReport(CamelModel):
    """Read-only view of a user-submitted hazard report."""

    id: Optional[str] = None
    type: HazardType = "Other"
    location: Coordinates
    severity: int = Field(ge=1, le=10)
    description: str = ""
    verified: bool = False
    image_url: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Seed files mix "...Z" and offset-less timestamps
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TypeCount(BaseModel):
    type: str
    count: int


class SeverityBucket(BaseModel):
    bucket: str  # lower bound of the range, or "other"
    count: int


class DailyCount(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class ReportAnalytics(CamelModel):
    total_reports: int
    verified_reports: int
    avg_severity: float
    reports_by_type: List[TypeCount]
    severity_distribution: List[SeverityBucket]
    reports_over_time: List[DailyCount]
