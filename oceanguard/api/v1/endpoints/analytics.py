from fastapi import APIRouter, Depends

from oceanguard.api.deps import get_report_analytics_service
from oceanguard.schemas.reports import ReportAnalytics
from oceanguard.services.report_analytics import ReportAnalyticsService

router = APIRouter(tags=["analytics"])


@router.get("/analytics/reports", response_model=ReportAnalytics)
async def get_report_analytics(
    service: ReportAnalyticsService = Depends(get_report_analytics_service),
) -> ReportAnalytics:
    return await service.get_report_analytics()
