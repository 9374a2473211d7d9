from fastapi import APIRouter, Depends, Query

from oceanguard.api.deps import get_social_media_service
from oceanguard.schemas.social_media import SocialMediaAnalytics
from oceanguard.services.social_analytics import SocialMediaService

router = APIRouter(tags=["social-media"])


@router.get("/social-media/analytics", response_model=SocialMediaAnalytics)
async def get_social_media_analytics(
    hazards_only: bool = Query(False, alias="hazardsOnly"),
    service: SocialMediaService = Depends(get_social_media_service),
) -> SocialMediaAnalytics:
    """
    Social media analytics built from Reddit and local hazard reports.
    With hazardsOnly=true, only posts with hazard language are counted.
    """
    return await service.get_social_media_analytics(hazards_only=hazards_only)
