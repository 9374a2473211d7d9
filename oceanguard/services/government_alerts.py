"""
Government hazard feeds (NOAA weather.gov alerts, USGS earthquakes) and their
aggregation into one alert list.
"""
import asyncio
import logging
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from oceanguard.core.config import Settings, settings as default_settings
from oceanguard.core.exceptions import ParseError, UpstreamFetchError
from oceanguard.schemas.alerts import AlertsResult, AlertSummary, Coordinates, NormalizedAlert
from oceanguard.schemas.upstream import FeatureCollection, NoaaAlertFeature, UsgsFeature
from oceanguard.services.collectors import BaseCollector

logger = logging.getLogger(__name__)

MARINE_KEYWORDS: Tuple[str, ...] = (
    "marine", "coastal", "ocean", "tsunami", "beach", "surf",
    "rip current", "storm surge", "hurricane", "tropical",
)

SHALLOW_DEPTH_KM = 70.0
SHALLOW_MIN_MAGNITUDE = 5.0
EXTREME_MAGNITUDE = 7.0
SEVERE_MAGNITUDE = 6.0


def _parse_features(source: str, payload) -> List[dict]:
    try:
        return FeatureCollection.model_validate(payload).features
    except ValidationError as e:
        raise ParseError(source, f"unexpected feed shape: {e}") from e


def is_marine_alert(event: str, description: str, area: str) -> bool:
    haystacks = (event.lower(), description.lower(), area.lower())
    return any(keyword in text for keyword in MARINE_KEYWORDS for text in haystacks)


def is_relevant_earthquake(depth_km: float, magnitude: float, tsunami_flag: int) -> bool:
    """Shallow quakes of magnitude 5+ qualify; a tsunami flag qualifies at any depth."""
    return (depth_km < SHALLOW_DEPTH_KM and magnitude >= SHALLOW_MIN_MAGNITUDE) or tsunami_flag == 1


def magnitude_severity(magnitude: float) -> str:
    if magnitude >= EXTREME_MAGNITUDE:
        return "Extreme"
    if magnitude >= SEVERE_MAGNITUDE:
        return "Severe"
    return "Moderate"


class NoaaAlertCollector(BaseCollector):
    """
    NOAA / National Weather Service active alerts.
    See: https://www.weather.gov/documentation/services-web-api
    """

    source = "NOAA"

    def __init__(
        self,
        base_url: str = "https://api.weather.gov",
        user_agent: str = "OceanGuard-App/1.0",
        timeout: float = 10.0,
        max_alerts: int = 20,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(user_agent=user_agent, timeout=timeout, client=client)
        self.base_url = base_url.rstrip("/")
        self.max_alerts = max_alerts

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "NoaaAlertCollector":
        return cls(
            base_url=settings.noaa_base_url,
            user_agent=settings.noaa_user_agent,
            timeout=settings.alerts_timeout_seconds,
            max_alerts=settings.noaa_max_alerts,
            client=client,
        )

    async def fetch_weather_alerts(self) -> List[NormalizedAlert]:
        """Marine-relevant active alerts, in feed order, at most `max_alerts`."""
        try:
            payload = await self._get_json(
                f"{self.base_url}/alerts/active", params={"message_type": "alert"})
            features = _parse_features(self.source, payload)
        except UpstreamFetchError as e:
            logger.error(f"Error fetching NOAA alerts: {e}")
            return []

        fetched_at = datetime.now(timezone.utc)
        alerts: List[NormalizedAlert] = []
        for raw in features:
            try:
                feature = NoaaAlertFeature.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Skipping malformed NOAA alert: {e}")
                continue

            props = feature.properties
            if not is_marine_alert(props.event, props.description or "", props.area_desc):
                continue

            alerts.append(NormalizedAlert(
                id=feature.id,
                category="tsunami" if "tsunami" in props.event.lower() else "weather",
                source="NOAA",
                title=props.event,
                severity_label=props.severity or "Unknown",
                description=props.headline or props.description or "",
                location_label=props.area_desc,
                observed_at=props.onset or fetched_at,
                expires_at=props.expires,
                instruction=props.instruction,
            ))
            if len(alerts) >= self.max_alerts:
                break

        logger.info(f"Fetched {len(alerts)} marine NOAA alerts")
        return alerts


class UsgsEarthquakeCollector(BaseCollector):
    """
    USGS FDSN earthquake catalog.
    See: https://earthquake.usgs.gov/fdsnws/event/1/
    """

    source = "USGS"

    def __init__(
        self,
        base_url: str = "https://earthquake.usgs.gov",
        user_agent: str = "OceanGuard-App/1.0",
        timeout: float = 10.0,
        min_magnitude: float = 4.5,
        query_limit: int = 50,
        max_alerts: int = 15,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(user_agent=user_agent, timeout=timeout, client=client)
        self.base_url = base_url.rstrip("/")
        self.min_magnitude = min_magnitude
        self.query_limit = query_limit
        self.max_alerts = max_alerts

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "UsgsEarthquakeCollector":
        return cls(
            base_url=settings.usgs_base_url,
            user_agent=settings.usgs_user_agent,
            timeout=settings.alerts_timeout_seconds,
            min_magnitude=settings.usgs_min_magnitude,
            query_limit=settings.usgs_query_limit,
            max_alerts=settings.usgs_max_alerts,
            client=client,
        )

    async def fetch_earthquake_alerts(self) -> List[NormalizedAlert]:
        """Recent shallow or tsunami-flagged earthquakes, newest first, at most `max_alerts`."""
        params = {
            "format": "geojson",
            "minmagnitude": self.min_magnitude,
            "limit": self.query_limit,
            "orderby": "time",
        }
        try:
            payload = await self._get_json(f"{self.base_url}/fdsnws/event/1/query", params=params)
            features = _parse_features(self.source, payload)
        except UpstreamFetchError as e:
            logger.error(f"Error fetching USGS earthquakes: {e}")
            return []

        alerts: List[NormalizedAlert] = []
        for raw in features:
            try:
                quake = UsgsFeature.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Skipping malformed USGS event: {e}")
                continue

            props = quake.properties
            lng, lat, depth = quake.geometry.coordinates[:3]
            magnitude = props.mag if props.mag is not None else 0.0
            if not is_relevant_earthquake(depth, magnitude, props.tsunami):
                continue

            description = f"Magnitude {magnitude:.1f} earthquake"
            if props.tsunami:
                description += " - TSUNAMI POSSIBLE"

            alerts.append(NormalizedAlert(
                id=quake.id,
                category="earthquake",
                source="USGS",
                title=props.title or f"M {magnitude:.1f} - {props.place or 'Unknown location'}",
                severity_label=magnitude_severity(magnitude),
                description=description,
                location_label=props.place or "Unknown location",
                coordinates=Coordinates(lat=lat, lng=lng),
                observed_at=datetime.fromtimestamp(props.time / 1000, tz=timezone.utc),
                details_url=props.url,
            ))
            if len(alerts) >= self.max_alerts:
                break

        logger.info(f"Fetched {len(alerts)} relevant USGS earthquakes")
        return alerts


def summarize_alerts(alerts: Iterable[NormalizedAlert]) -> AlertSummary:
    counts = Counter(alert.category for alert in alerts)
    return AlertSummary(
        total=counts["weather"] + counts["tsunami"] + counts["earthquake"],
        weather=counts["weather"],
        tsunami=counts["tsunami"],
        earthquake=counts["earthquake"],
    )


class GovernmentAlertService:
    """Merges NOAA and USGS alerts into one recency-ordered list with a summary."""

    def __init__(
        self,
        noaa: NoaaAlertCollector,
        usgs: UsgsEarthquakeCollector,
        cache_ttl: float = 0.0,
    ):
        self.noaa = noaa
        self.usgs = usgs
        self.cache_ttl = cache_ttl
        self._cached: Optional[Tuple[float, AlertsResult]] = None

    @classmethod
    def from_settings(cls, settings: Settings = default_settings,
                      client: Optional[httpx.AsyncClient] = None) -> "GovernmentAlertService":
        return cls(
            noaa=NoaaAlertCollector.from_settings(settings, client=client),
            usgs=UsgsEarthquakeCollector.from_settings(settings, client=client),
            cache_ttl=settings.alerts_cache_ttl_seconds,
        )

    async def get_all_alerts(self) -> AlertsResult:
        if self.cache_ttl > 0 and self._cached is not None:
            stored_at, result = self._cached
            if time.monotonic() - stored_at < self.cache_ttl:
                return result

        # Both feeds are independent; a failing one simply contributes nothing
        results = await asyncio.gather(
            self.noaa.fetch_weather_alerts(),
            self.usgs.fetch_earthquake_alerts(),
            return_exceptions=True,
        )
        combined: List[NormalizedAlert] = []
        for collector, outcome in zip((self.noaa, self.usgs), results):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.error(f"Unexpected failure in {collector.source} collector: {outcome!r}")
                continue
            combined.extend(outcome)

        alerts = sorted(_dedupe(combined), key=lambda alert: alert.observed_at, reverse=True)
        result = AlertsResult(alerts=alerts, summary=summarize_alerts(alerts))

        if self.cache_ttl > 0:
            self._cached = (time.monotonic(), result)
        return result


def _dedupe(alerts: Iterable[NormalizedAlert]) -> List[NormalizedAlert]:
    seen = set()
    unique = []
    for alert in alerts:
        if alert.id in seen:
            logger.error(f"Duplicate alert id {alert.id!r} from {alert.source}; dropping")
            continue
        seen.add(alert.id)
        unique.append(alert)
    return unique
