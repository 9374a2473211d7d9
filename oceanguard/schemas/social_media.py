from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from oceanguard.schemas.base import CamelModel


class RawPost(BaseModel):
    """One externally fetched social post, normalized across platforms."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    author: str
    community: str
    score: int = 0
    comment_count: int = 0
    created_at: datetime
    permalink: str
    external_url: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def text(self) -> str:
        return f"{self.title} {self.body}"


class ClassifiedPost(RawPost):
    is_ocean_related: bool
    is_hazard_related: bool


class SentimentBucket(CamelModel):
    name: Literal["Negative", "Neutral", "Positive"]
    count: int
    percentage: int


class KeywordFrequency(CamelModel):
    term: str  # display form, e.g. "#oilspill"
    count: int


class EmergingThreat(CamelModel):
    term: str
    growth_label: str
    description: str


class MentionVolumePoint(CamelModel):
    period: str  # "Week 1" (oldest) .. "Week 4" (most recent)
    mentions: int


class PlatformMention(CamelModel):
    name: str
    value: int


class HighImpactPost(CamelModel):
    platform: str
    text: str
    engagement: str
    url: Optional[str] = None
    image_url: str


class Influencer(CamelModel):
    name: str
    handle: str
    avatar: str
    followers: str


class SocialMediaAnalytics(CamelModel):
    mention_volume_data: List[MentionVolumePoint]
    mentions_by_platform: List[PlatformMention]
    top_keywords: List[KeywordFrequency]
    high_impact_posts: List[HighImpactPost]
    emerging_threats: List[EmergingThreat]
    top_influencers: List[Influencer]
    sentiment: List[SentimentBucket]
    total_posts: int
    hazards_only: bool
    generated_at: datetime
