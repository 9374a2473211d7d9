"""
Data collectors for external social and government sources.

Each collector wraps one public HTTP API, validates its payload against the
schemas in oceanguard.schemas.upstream and normalizes it. Collectors absorb
their own source failures: a broken upstream yields fewer (or no) results,
never an exception.

IMPORTANT: Always respect platform Terms of Service and rate limits.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from oceanguard.core.config import Settings, settings as default_settings
from oceanguard.core.exceptions import ParseError, UpstreamFetchError
from oceanguard.schemas.social_media import RawPost
from oceanguard.schemas.upstream import RedditListing, RedditPostData
from oceanguard.services.classifier import is_ocean_related

logger = logging.getLogger(__name__)


class BaseCollector:
    """Shared HTTP plumbing for all collectors."""

    source = "upstream"

    def __init__(
        self,
        user_agent: str,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.headers = {"User-Agent": user_agent}
        self.timeout = httpx.Timeout(timeout)
        # Tests and long-lived apps may share a client; otherwise one is opened per request
        self._client = client

    async def _get_json(self, url: str, **kwargs) -> Any:
        """GET a URL and decode JSON, raising UpstreamFetchError or ParseError."""
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=self.headers, timeout=self.timeout, **kwargs)
            else:
                async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
                    response = await client.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamFetchError(self.source, f"request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(self.source, f"invalid JSON from {url}: {e}") from e


class RedditCollector(BaseCollector):
    """
    Reddit public listing collector.
    Uses the unauthenticated `/r/{community}/hot.json` listing, which requires an
    identifying User-Agent and is rate limited per client.
    """

    source = "reddit"

    def __init__(
        self,
        base_url: str = "https://www.reddit.com",
        user_agent: str = "OceanGuard:v1.0.0",
        communities: Sequence[str] = (),
        max_communities: int = 2,
        timeout: float = 5.0,
        request_delay: float = 2.0,
        max_posts: int = 20,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(user_agent=user_agent, timeout=timeout, client=client)
        self.base_url = base_url.rstrip("/")
        self.communities = list(communities)
        self.max_communities = max_communities
        self.request_delay = request_delay
        self.max_posts = max_posts

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "RedditCollector":
        return cls(
            base_url=settings.reddit_base_url,
            user_agent=settings.reddit_user_agent,
            communities=settings.reddit_communities,
            max_communities=settings.reddit_max_communities,
            timeout=settings.reddit_timeout_seconds,
            request_delay=settings.reddit_request_delay_seconds,
            max_posts=settings.reddit_max_posts,
            client=client,
        )

    async def fetch_posts(
        self,
        communities: Optional[Sequence[str]] = None,
        limit_per_community: int = 25,
    ) -> List[RawPost]:
        """
        Fetch hot posts from the first `max_communities` communities, one request
        at a time with `request_delay` seconds between requests.

        Only ocean-related posts are kept. Failing communities are skipped.
        Returns at most `max_posts` posts, highest score first.
        """
        selected = list(communities if communities is not None else self.communities)
        selected = selected[:self.max_communities]

        all_posts: List[RawPost] = []
        for index, community in enumerate(selected):
            if index > 0 and self.request_delay > 0:
                await asyncio.sleep(self.request_delay)
            try:
                posts = await self._fetch_community(community, limit_per_community)
                all_posts.extend(posts)
                logger.info(f"Fetched {len(posts)} ocean-related posts from r/{community}")
            except UpstreamFetchError as e:
                logger.error(f"Error fetching from r/{community}: {e}")

        all_posts.sort(key=lambda post: post.score, reverse=True)
        return all_posts[:self.max_posts]

    async def _fetch_community(self, community: str, limit: int) -> List[RawPost]:
        url = f"{self.base_url}/r/{community}/hot.json"
        payload = await self._get_json(url, params={"limit": limit})
        try:
            listing = RedditListing.model_validate(payload)
        except ValidationError as e:
            raise ParseError(self.source, f"unexpected listing shape for r/{community}: {e}") from e

        posts: List[RawPost] = []
        for child in listing.data.children:
            try:
                item = RedditPostData.model_validate(child.data)
            except ValidationError as e:
                logger.debug(f"Skipping malformed Reddit post in r/{community}: {e}")
                continue
            if is_ocean_related(f"{item.title} {item.selftext or ''}"):
                posts.append(self._normalize(item))
        return posts

    @staticmethod
    def _normalize(item: RedditPostData) -> RawPost:
        return RawPost(
            title=item.title,
            # Link posts have no selftext; fall back to the title
            body=item.selftext or item.title,
            author=item.author,
            community=item.subreddit,
            score=item.score,
            comment_count=item.num_comments,
            created_at=datetime.fromtimestamp(item.created_utc, tz=timezone.utc),
            permalink=f"https://reddit.com{item.permalink}",
            external_url=item.url,
        )
