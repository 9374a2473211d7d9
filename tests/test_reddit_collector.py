import httpx
import pytest

from oceanguard.services import collectors
from oceanguard.services.collectors import RedditCollector

from conftest import mock_client, reddit_child, reddit_listing


def make_collector(handler, **kwargs) -> RedditCollector:
    options = dict(
        communities=["environment", "ocean", "pollution"],
        request_delay=0,
        client=mock_client(handler),
    )
    options.update(kwargs)
    return RedditCollector(**options)


@pytest.mark.asyncio
async def test_fetch_posts_filters_and_normalizes():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=reddit_listing(
            reddit_child("Oil spill near the reef", selftext="Crews responding", score=50),
            reddit_child("My new car is fast", score=500),
            reddit_child("Plastic debris on the beach", selftext="", score=20,
                         url="https://i.redd.it/abc.jpg"),
        ))

    posts = await make_collector(handler).fetch_posts(["ocean"])

    assert [p.title for p in posts] == ["Oil spill near the reef", "Plastic debris on the beach"]
    first, second = posts
    assert first.body == "Crews responding"
    # Missing selftext falls back to the title
    assert second.body == "Plastic debris on the beach"
    assert first.permalink.startswith("https://reddit.com/r/ocean/comments/")
    assert second.external_url == "https://i.redd.it/abc.jpg"
    assert first.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_request_shape_and_user_agent():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=reddit_listing())

    collector = make_collector(handler, user_agent="OceanGuard:test")
    await collector.fetch_posts(["ocean"], limit_per_community=25)

    assert len(seen) == 1
    assert seen[0].url.path == "/r/ocean/hot.json"
    assert seen[0].url.params["limit"] == "25"
    assert seen[0].headers["User-Agent"] == "OceanGuard:test"


@pytest.mark.asyncio
async def test_only_first_two_communities_are_queried():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=reddit_listing())

    await make_collector(handler).fetch_posts()

    assert paths == ["/r/environment/hot.json", "/r/ocean/hot.json"]


@pytest.mark.asyncio
async def test_requests_are_serialized_with_delay(monkeypatch):
    events = []

    async def fake_sleep(seconds):
        events.append(("sleep", seconds))

    def handler(request: httpx.Request) -> httpx.Response:
        events.append(("get", request.url.path))
        return httpx.Response(200, json=reddit_listing())

    monkeypatch.setattr(collectors.asyncio, "sleep", fake_sleep)
    await make_collector(handler, request_delay=2.0).fetch_posts()

    assert events == [
        ("get", "/r/environment/hot.json"),
        ("sleep", 2.0),
        ("get", "/r/ocean/hot.json"),
    ]


@pytest.mark.asyncio
async def test_failing_community_does_not_abort_collection():
    def handler(request: httpx.Request) -> httpx.Response:
        if "environment" in request.url.path:
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, json=reddit_listing(
            reddit_child("Coral bleaching on the reef", subreddit="ocean"),
        ))

    posts = await make_collector(handler).fetch_posts()

    assert [p.community for p in posts] == ["ocean"]


@pytest.mark.asyncio
async def test_non_2xx_and_malformed_bodies_are_absorbed():
    def handler(request: httpx.Request) -> httpx.Response:
        if "environment" in request.url.path:
            return httpx.Response(429, json={"message": "Too Many Requests"})
        return httpx.Response(200, text="<html>not json</html>")

    assert await make_collector(handler).fetch_posts() == []


@pytest.mark.asyncio
async def test_malformed_post_is_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=reddit_listing(
            {"kind": "t3", "data": {"selftext": "no title on this ocean post"}},
            reddit_child("Tsunami drill on the coast"),
        ))

    posts = await make_collector(handler).fetch_posts(["ocean"])
    assert [p.title for p in posts] == ["Tsunami drill on the coast"]


@pytest.mark.asyncio
async def test_results_sorted_by_score_and_capped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=reddit_listing(
            *[reddit_child(f"Ocean story {i}", score=i) for i in range(15)]
        ))

    posts = await make_collector(handler).fetch_posts()

    assert len(posts) == 20
    scores = [p.score for p in posts]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] == 14


@pytest.mark.asyncio
async def test_null_author_defaults_to_deleted():
    child = reddit_child("Red tide closes the beach")
    child["data"]["author"] = None

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=reddit_listing(child))

    posts = await make_collector(handler).fetch_posts(["ocean"])

    assert [p.author for p in posts] == ["[deleted]"]
