from datetime import datetime, timezone

import httpx
import pytest

from oceanguard.schemas.alerts import NormalizedAlert
from oceanguard.services.government_alerts import (
    GovernmentAlertService,
    NoaaAlertCollector,
    UsgsEarthquakeCollector,
    is_relevant_earthquake,
    magnitude_severity,
    summarize_alerts,
)

from conftest import mock_client


def noaa_feature(alert_id, event, description="", area="Inland county", onset="2024-06-01T10:00:00-04:00",
                 headline=None, severity="Moderate"):
    return {
        "id": alert_id,
        "type": "Feature",
        "properties": {
            "event": event,
            "severity": severity,
            "certainty": "Likely",
            "urgency": "Expected",
            "headline": headline,
            "description": description,
            "instruction": "Stay away from the water.",
            "areaDesc": area,
            "onset": onset,
            "expires": "2024-06-02T10:00:00-04:00",
        },
    }


def usgs_feature(quake_id, mag, depth, tsunami=0, time_ms=1717236000000, place="100 km S of Somewhere"):
    return {
        "id": quake_id,
        "properties": {
            "mag": mag,
            "place": place,
            "time": time_ms,
            "url": f"https://earthquake.usgs.gov/earthquakes/eventpage/{quake_id}",
            "tsunami": tsunami,
            "title": f"M {mag} - {place}",
        },
        "geometry": {"type": "Point", "coordinates": [142.3, 38.1, depth]},
    }


def feed(*features):
    return {"type": "FeatureCollection", "features": list(features)}


def alert(alert_id, category, source, observed_at):
    return NormalizedAlert(
        id=alert_id, category=category, source=source, title=alert_id,
        severity_label="Moderate", description="", location_label="",
        observed_at=observed_at,
    )


# --- relevance rules -------------------------------------------------------

def test_earthquake_relevance_rule():
    assert not is_relevant_earthquake(depth_km=100, magnitude=6.0, tsunami_flag=0)
    assert is_relevant_earthquake(depth_km=30, magnitude=5.2, tsunami_flag=0)
    assert is_relevant_earthquake(depth_km=200, magnitude=8.0, tsunami_flag=1)
    assert not is_relevant_earthquake(depth_km=10, magnitude=4.9, tsunami_flag=0)


def test_magnitude_severity_thresholds():
    assert magnitude_severity(7.0) == "Extreme"
    assert magnitude_severity(6.5) == "Severe"
    assert magnitude_severity(6.0) == "Severe"
    assert magnitude_severity(5.9) == "Moderate"


# --- NOAA ------------------------------------------------------------------

@pytest.mark.asyncio
async def test_noaa_filters_marine_alerts_and_classifies():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/alerts/active"
        assert request.url.params["message_type"] == "alert"
        assert "User-Agent" in request.headers
        return httpx.Response(200, json=feed(
            noaa_feature("urn:1", "Tsunami Warning", headline="Tsunami warning for the coast"),
            noaa_feature("urn:2", "Heat Advisory", description="Hot inland temperatures"),
            noaa_feature("urn:3", "Small Craft Advisory", area="Coastal waters from A to B"),
            noaa_feature("urn:4", "Flood Watch", description="Storm surge expected", onset=None),
        ))

    collector = NoaaAlertCollector(client=mock_client(handler))
    alerts = await collector.fetch_weather_alerts()

    assert [a.id for a in alerts] == ["urn:1", "urn:3", "urn:4"]
    tsunami, craft, flood = alerts
    assert tsunami.category == "tsunami"
    assert tsunami.description == "Tsunami warning for the coast"
    assert craft.category == "weather"
    assert craft.source == "NOAA"
    assert craft.location_label == "Coastal waters from A to B"
    assert craft.instruction == "Stay away from the water."
    assert craft.expires_at is not None
    # Missing onset falls back to the fetch time
    assert flood.observed_at.tzinfo is not None


@pytest.mark.asyncio
async def test_noaa_truncates_in_feed_order():
    def handler(request):
        return httpx.Response(200, json=feed(
            *[noaa_feature(f"urn:{i}", "Rip Current Statement") for i in range(30)]
        ))

    alerts = await NoaaAlertCollector(client=mock_client(handler), max_alerts=20).fetch_weather_alerts()
    assert [a.id for a in alerts] == [f"urn:{i}" for i in range(20)]


@pytest.mark.asyncio
async def test_noaa_failure_returns_empty_list():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    assert await NoaaAlertCollector(client=mock_client(handler)).fetch_weather_alerts() == []


@pytest.mark.asyncio
async def test_noaa_missing_severity_defaults_to_unknown():
    def handler(request):
        return httpx.Response(200, json=feed(noaa_feature("urn:1", "Hurricane Warning", severity=None)))

    alerts = await NoaaAlertCollector(client=mock_client(handler)).fetch_weather_alerts()
    assert alerts[0].severity_label == "Unknown"


# --- USGS ------------------------------------------------------------------

@pytest.mark.asyncio
async def test_usgs_applies_depth_magnitude_tsunami_rule():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/fdsnws/event/1/query"
        assert request.url.params["format"] == "geojson"
        assert request.url.params["minmagnitude"] == "4.5"
        assert request.url.params["orderby"] == "time"
        return httpx.Response(200, json=feed(
            usgs_feature("deep", mag=6.0, depth=100),
            usgs_feature("shallow", mag=5.2, depth=30),
            usgs_feature("tsunami", mag=8.0, depth=200, tsunami=1),
        ))

    alerts = await UsgsEarthquakeCollector(client=mock_client(handler)).fetch_earthquake_alerts()

    assert [a.id for a in alerts] == ["shallow", "tsunami"]
    shallow, flagged = alerts
    assert shallow.severity_label == "Moderate"
    assert shallow.description == "Magnitude 5.2 earthquake"
    assert shallow.coordinates.lat == 38.1
    assert shallow.coordinates.lng == 142.3
    assert shallow.observed_at == datetime.fromtimestamp(1717236000, tz=timezone.utc)
    assert flagged.severity_label == "Extreme"
    assert flagged.description.endswith("TSUNAMI POSSIBLE")
    assert flagged.category == "earthquake"
    assert flagged.source == "USGS"


@pytest.mark.asyncio
async def test_usgs_caps_results_and_skips_bad_records():
    def handler(request):
        features = [usgs_feature(f"eq{i}", mag=5.5, depth=10) for i in range(20)]
        features.insert(0, {"id": "broken", "properties": {"mag": 6.0}})
        return httpx.Response(200, json=feed(*features))

    alerts = await UsgsEarthquakeCollector(client=mock_client(handler)).fetch_earthquake_alerts()
    assert len(alerts) == 15
    assert alerts[0].id == "eq0"


@pytest.mark.asyncio
async def test_usgs_network_error_returns_empty_list():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert await UsgsEarthquakeCollector(client=mock_client(handler)).fetch_earthquake_alerts() == []


# --- aggregation -----------------------------------------------------------

def test_summary_total_matches_categories():
    t = datetime(2024, 6, 1, tzinfo=timezone.utc)
    summary = summarize_alerts([
        alert("a", "weather", "NOAA", t),
        alert("b", "tsunami", "NOAA", t),
        alert("c", "earthquake", "USGS", t),
        alert("d", "earthquake", "USGS", t),
    ])
    assert (summary.weather, summary.tsunami, summary.earthquake) == (1, 1, 2)
    assert summary.total == 4


class StubNoaa:
    source = "NOAA"

    def __init__(self, alerts=None, error=None):
        self.alerts = alerts or []
        self.error = error
        self.calls = 0

    async def fetch_weather_alerts(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.alerts


class StubUsgs:
    source = "USGS"

    def __init__(self, alerts=None):
        self.alerts = alerts or []

    async def fetch_earthquake_alerts(self):
        return self.alerts


@pytest.mark.asyncio
async def test_get_all_alerts_merges_and_sorts_by_recency():
    def ts(hour):
        return datetime(2024, 6, 1, hour, tzinfo=timezone.utc)

    noaa = StubNoaa([
        alert("n1", "weather", "NOAA", ts(1)),
        alert("n2", "tsunami", "NOAA", ts(5)),
        alert("n3", "weather", "NOAA", ts(3)),
    ])
    usgs = StubUsgs([
        alert("u1", "earthquake", "USGS", ts(4)),
        alert("u2", "earthquake", "USGS", ts(2)),
    ])

    result = await GovernmentAlertService(noaa, usgs).get_all_alerts()

    assert [a.id for a in result.alerts] == ["n2", "u1", "n3", "u2", "n1"]
    summary = result.summary
    assert summary.total == 5 == summary.weather + summary.tsunami + summary.earthquake


@pytest.mark.asyncio
async def test_get_all_alerts_survives_collector_failure():
    t = datetime(2024, 6, 1, tzinfo=timezone.utc)
    service = GovernmentAlertService(
        StubNoaa(error=RuntimeError("boom")),
        StubUsgs([alert("u1", "earthquake", "USGS", t)]),
    )
    result = await service.get_all_alerts()
    assert [a.id for a in result.alerts] == ["u1"]
    assert result.summary.total == 1


@pytest.mark.asyncio
async def test_get_all_alerts_empty_when_both_sources_fail():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    client = mock_client(handler)
    service = GovernmentAlertService(
        NoaaAlertCollector(client=client), UsgsEarthquakeCollector(client=client))

    result = await service.get_all_alerts()

    assert result.alerts == []
    assert result.summary.total == 0
    assert result.summary.weather == result.summary.tsunami == result.summary.earthquake == 0


@pytest.mark.asyncio
async def test_duplicate_ids_are_dropped():
    t = datetime(2024, 6, 1, tzinfo=timezone.utc)
    service = GovernmentAlertService(
        StubNoaa([alert("same", "weather", "NOAA", t)]),
        StubUsgs([alert("same", "earthquake", "USGS", t)]),
    )
    result = await service.get_all_alerts()
    assert len(result.alerts) == 1
    assert result.summary.total == 1


@pytest.mark.asyncio
async def test_alert_cache_reuses_recent_result():
    noaa = StubNoaa()
    service = GovernmentAlertService(noaa, StubUsgs(), cache_ttl=60)

    await service.get_all_alerts()
    await service.get_all_alerts()

    assert noaa.calls == 1


@pytest.mark.asyncio
async def test_usgs_null_tsunami_flag_counts_as_zero():
    def handler(request):
        shallow = usgs_feature("shallow", mag=5.4, depth=20)
        shallow["properties"]["tsunami"] = None
        deep = usgs_feature("deep", mag=6.5, depth=300)
        deep["properties"]["tsunami"] = None
        return httpx.Response(200, json=feed(shallow, deep))

    alerts = await UsgsEarthquakeCollector(client=mock_client(handler)).fetch_earthquake_alerts()

    assert [a.id for a in alerts] == ["shallow"]
    assert not alerts[0].description.endswith("TSUNAMI POSSIBLE")
