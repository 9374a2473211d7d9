import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from oceanguard.core.exceptions import AggregationError
from oceanguard.schemas.reports import (
    DailyCount,
    HazardReport,
    ReportAnalytics,
    SeverityBucket,
    TypeCount,
)
from oceanguard.services.report_store import HazardReportStore

logger = logging.getLogger(__name__)

# Half-open severity ranges [0,4) [4,7) [7,9) [9,11)
SEVERITY_BOUNDARIES = (0, 4, 7, 9, 11)
TIMELINE_DAYS = 28


def _severity_bucket(severity: int) -> str:
    for lower, upper in zip(SEVERITY_BOUNDARIES, SEVERITY_BOUNDARIES[1:]):
        if lower <= severity < upper:
            return str(lower)
    return "other"


def compute_report_analytics(
    reports: Sequence[HazardReport],
    now: Optional[datetime] = None,
) -> ReportAnalytics:
    now = now or datetime.now(timezone.utc)
    total = len(reports)

    by_type = Counter(report.type for report in reports)
    by_severity = Counter(_severity_bucket(report.severity) for report in reports)
    bucket_order = [str(lower) for lower in SEVERITY_BOUNDARIES[:-1]] + ["other"]

    since = now - timedelta(days=TIMELINE_DAYS)
    per_day = Counter(
        report.created_at.strftime("%Y-%m-%d")
        for report in reports
        if report.created_at >= since
    )

    return ReportAnalytics(
        total_reports=total,
        verified_reports=sum(1 for report in reports if report.verified),
        avg_severity=(sum(report.severity for report in reports) / total) if total else 0.0,
        reports_by_type=[TypeCount(type=name, count=count) for name, count in sorted(by_type.items())],
        severity_distribution=[
            SeverityBucket(bucket=bucket, count=by_severity[bucket])
            for bucket in bucket_order if by_severity[bucket]
        ],
        reports_over_time=[DailyCount(date=day, count=count) for day, count in sorted(per_day.items())],
    )


class ReportAnalyticsService:
    def __init__(self, store: HazardReportStore):
        self.store = store

    async def get_report_analytics(self, now: Optional[datetime] = None) -> ReportAnalytics:
        try:
            reports: List[HazardReport] = await self.store.list_hazard_reports()
        except Exception as e:
            logger.error(f"Hazard report store unavailable: {e}")
            raise AggregationError(f"Could not read hazard reports: {e}") from e
        return compute_report_analytics(reports, now=now)
