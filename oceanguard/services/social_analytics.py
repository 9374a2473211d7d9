"""
Social media analytics for the dashboard.

Composes Reddit posts, local hazard reports, sentiment and keyword trends into
one SocialMediaAnalytics payload. Several figures here are presentation
scaling or synthetic estimates rather than measurements; they are named as
such below.
"""
import logging
import re
import time
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from oceanguard.core.config import Settings, settings as default_settings
from oceanguard.core.exceptions import AggregationError
from oceanguard.schemas.reports import HazardReport
from oceanguard.schemas.social_media import (
    HighImpactPost,
    Influencer,
    MentionVolumePoint,
    PlatformMention,
    RawPost,
    SocialMediaAnalytics,
)
from oceanguard.services.classifier import classify_post
from oceanguard.services.collectors import RedditCollector
from oceanguard.services.keywords import derive_emerging_threats, extract_top_keywords
from oceanguard.services.report_store import HazardReportStore
from oceanguard.services.sentiment import SentimentScorer

logger = logging.getLogger(__name__)

WEEKS = 4
# Chart scaling, not unit conversions
POST_MENTION_SCALE = 100
REPORT_MENTION_SCALE = 50
REDDIT_PLATFORM_SCALE = 50
LOCAL_PLATFORM_SCALE = 10
# Synthetic estimates relative to the Reddit figure; there is no Twitter or Facebook integration
SYNTHETIC_TWITTER_RATIO = 0.3
SYNTHETIC_FACEBOOK_RATIO = 0.2

HIGH_IMPACT_COUNT = 4
INFLUENCER_COUNT = 4
EXCLUDED_AUTHORS = frozenset({"[deleted]", "AutoModerator"})
IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
IMAGE_HOSTS = ("i.redd.it", "i.imgur.com")

DEFAULT_INFLUENCERS = (
    Influencer(name="Ocean Conservancy", handle="@OceanConservancy",
               avatar="https://picsum.photos/seed/inf1/40/40", followers="2.1M"),
    Influencer(name="National Geographic", handle="@NatGeo",
               avatar="https://picsum.photos/seed/inf2/40/40", followers="280M"),
    Influencer(name="Greenpeace", handle="@Greenpeace",
               avatar="https://picsum.photos/seed/inf3/40/40", followers="3.5M"),
    Influencer(name="Dr. Ayana Johnson", handle="@ayanaeliza",
               avatar="https://picsum.photos/seed/inf4/40/40", followers="150K"),
)


def weekly_mention_volume(
    posts: Sequence[RawPost],
    reports: Sequence[HazardReport],
    now: datetime,
) -> List[MentionVolumePoint]:
    """
    Four consecutive 7-day windows ending now, oldest first.

    Window for "Week N" is [now - (5 - N) weeks, now - (4 - N) weeks).
    """
    points = []
    for weeks_back in range(WEEKS - 1, -1, -1):
        week_end = now - timedelta(days=7 * weeks_back)
        week_start = week_end - timedelta(days=7)
        week_posts = sum(1 for post in posts if week_start <= post.created_at < week_end)
        week_reports = sum(1 for report in reports if week_start <= report.created_at < week_end)
        points.append(MentionVolumePoint(
            period=f"Week {WEEKS - weeks_back}",
            mentions=week_posts * POST_MENTION_SCALE + week_reports * REPORT_MENTION_SCALE,
        ))
    return points


def platform_breakdown(post_count: int, report_count: int) -> List[PlatformMention]:
    reddit = post_count * REDDIT_PLATFORM_SCALE
    return [
        PlatformMention(name="Reddit", value=reddit),
        PlatformMention(name="OceanGuard", value=report_count * LOCAL_PLATFORM_SCALE),
        PlatformMention(name="Twitter", value=int(reddit * SYNTHETIC_TWITTER_RATIO)),
        PlatformMention(name="Facebook", value=int(reddit * SYNTHETIC_FACEBOOK_RATIO)),
    ]


def image_url_for(post: RawPost) -> str:
    url = post.external_url or ""
    if url and (IMAGE_EXTENSION_RE.search(url) or any(host in url for host in IMAGE_HOSTS)):
        return url
    # Deterministic placeholder keyed by the start of the title
    return f"https://picsum.photos/seed/{quote(post.title[:5], safe='')}/400/300"


def high_impact_posts(posts: Sequence[RawPost]) -> List[HighImpactPost]:
    top = sorted(posts, key=lambda post: post.score, reverse=True)[:HIGH_IMPACT_COUNT]
    return [
        HighImpactPost(
            platform="Reddit",
            text=f'"{post.title}" - r/{post.community}',
            engagement=f"{post.score / 1000:.1f}K upvotes, {post.comment_count} comments",
            url=post.permalink,
            image_url=image_url_for(post),
        )
        for post in top
    ]


def top_influencers(posts: Sequence[RawPost]) -> List[Influencer]:
    karma: Dict[str, int] = defaultdict(int)
    for post in posts:
        if post.author and post.author not in EXCLUDED_AUTHORS:
            karma[post.author] += post.score

    ranked = sorted(karma.items(), key=lambda item: item[1], reverse=True)[:INFLUENCER_COUNT]
    influencers = [
        Influencer(
            name=author,
            handle=f"u/{author}",
            avatar=f"https://www.reddit.com/user/{author}/avatar",
            followers=f"{score / 100:.1f}K karma",
        )
        for author, score in ranked
    ]
    if len(influencers) < INFLUENCER_COUNT:
        influencers.extend(DEFAULT_INFLUENCERS[:INFLUENCER_COUNT - len(influencers)])
    return influencers


class SocialMediaService:
    """Builds the social analytics payload from Reddit and local reports."""

    def __init__(
        self,
        collector: RedditCollector,
        report_store: HazardReportStore,
        scorer: Optional[SentimentScorer] = None,
        posts_per_community: int = 25,
        recent_report_limit: int = 50,
        cache_ttl: float = 0.0,
    ):
        self.collector = collector
        self.report_store = report_store
        self.scorer = scorer or SentimentScorer()
        self.posts_per_community = posts_per_community
        self.recent_report_limit = recent_report_limit
        self.cache_ttl = cache_ttl
        self._cache: Dict[bool, Tuple[float, SocialMediaAnalytics]] = {}

    @classmethod
    def from_settings(cls, report_store: HazardReportStore, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "SocialMediaService":
        return cls(
            collector=RedditCollector.from_settings(settings, client=client),
            report_store=report_store,
            posts_per_community=settings.reddit_posts_per_community,
            recent_report_limit=settings.recent_report_limit,
            cache_ttl=settings.analytics_cache_ttl_seconds,
        )

    async def get_social_media_analytics(
        self,
        hazards_only: bool = False,
        now: Optional[datetime] = None,
    ) -> SocialMediaAnalytics:
        if self.cache_ttl > 0 and hazards_only in self._cache:
            stored_at, cached = self._cache[hazards_only]
            if time.monotonic() - stored_at < self.cache_ttl:
                return cached

        # Source failures are absorbed inside the collector; anything escaping it is a fault here
        try:
            posts = await self.collector.fetch_posts(limit_per_community=self.posts_per_community)
        except Exception as e:
            logger.exception("Error collecting social media posts")
            raise AggregationError(f"Could not collect social media posts: {e}") from e
        classified = [classify_post(post) for post in posts]
        if hazards_only:
            classified = [post for post in classified if post.is_hazard_related]
        posts = classified

        try:
            reports = await self.report_store.find_recent_hazard_reports(self.recent_report_limit)
        except Exception as e:
            logger.error(f"Hazard report store unavailable: {e}")
            raise AggregationError(f"Could not read hazard reports: {e}") from e

        try:
            analytics = self._compose(posts, reports, hazards_only, now or datetime.now(timezone.utc))
        except Exception as e:
            logger.exception("Error generating social media analytics")
            raise AggregationError(f"Could not compose social media analytics: {e}") from e

        if self.cache_ttl > 0:
            self._cache[hazards_only] = (time.monotonic(), analytics)
        return analytics

    def _compose(
        self,
        posts: List[RawPost],
        reports: List[HazardReport],
        hazards_only: bool,
        now: datetime,
    ) -> SocialMediaAnalytics:
        top_keywords = extract_top_keywords(posts)
        return SocialMediaAnalytics(
            mention_volume_data=weekly_mention_volume(posts, reports, now),
            mentions_by_platform=platform_breakdown(len(posts), len(reports)),
            top_keywords=top_keywords,
            high_impact_posts=high_impact_posts(posts),
            emerging_threats=derive_emerging_threats(top_keywords),
            top_influencers=top_influencers(posts),
            sentiment=self.scorer.score_batch(posts),
            total_posts=len(posts),
            hazards_only=hazards_only,
            generated_at=now,
        )
