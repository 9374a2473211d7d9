from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx
import pytest

from oceanguard.schemas.alerts import Coordinates
from oceanguard.schemas.reports import HazardReport
from oceanguard.schemas.social_media import RawPost

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def make_post(
    title: str = "Oil spill spotted near the coast",
    body: str = "",
    author: str = "alice",
    score: int = 10,
    comments: int = 2,
    created_at: datetime = NOW - timedelta(days=1),
    community: str = "ocean",
    external_url: str = None,
) -> RawPost:
    return RawPost(
        title=title,
        body=body or title,
        author=author,
        community=community,
        score=score,
        comment_count=comments,
        created_at=created_at,
        permalink=f"https://reddit.com/r/{community}/comments/{abs(hash(title)) % 10000}",
        external_url=external_url,
    )


def make_report(
    created_at: datetime = NOW - timedelta(days=1),
    severity: int = 5,
    type: str = "Oil Spill",
    verified: bool = False,
) -> HazardReport:
    return HazardReport(
        type=type,
        location=Coordinates(lat=19.07, lng=72.87),
        severity=severity,
        verified=verified,
        created_at=created_at,
    )


def reddit_child(
    title: str,
    selftext: str = "",
    author: str = "alice",
    score: int = 10,
    created_utc: float = (NOW - timedelta(days=1)).timestamp(),
    subreddit: str = "ocean",
    url: str = "https://example.com/story",
) -> dict:
    return {
        "kind": "t3",
        "data": {
            "title": title,
            "selftext": selftext,
            "author": author,
            "subreddit": subreddit,
            "score": score,
            "num_comments": 3,
            "created_utc": created_utc,
            "permalink": f"/r/{subreddit}/comments/abc/{title[:10].replace(' ', '_')}/",
            "url": url,
        },
    }


def reddit_listing(*children: dict) -> dict:
    return {"kind": "Listing", "data": {"children": list(children)}}


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def now() -> datetime:
    return NOW
