"""
Response schemas of the external APIs, validated at the collector boundary.

Feeds are parsed loosely at the top level (a list of raw dicts) and each record
is validated on its own, so one malformed record does not discard the feed.
Missing optional fields fall back to the same defaults the dashboard expects.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Reddit -----------------------------------------------------------------

class RedditPostData(BaseModel):
    title: str
    selftext: Optional[str] = None
    author: str = "[deleted]"
    subreddit: str = ""
    score: int = 0
    num_comments: int = 0
    created_utc: float = 0.0
    permalink: str = ""
    url: Optional[str] = None

    @field_validator("author", mode="before")
    @classmethod
    def _none_to_deleted(cls, value):
        return "[deleted]" if value is None else value


class RedditChild(BaseModel):
    kind: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class RedditListingData(BaseModel):
    children: List[RedditChild] = Field(default_factory=list)


class RedditListing(BaseModel):
    data: RedditListingData = Field(default_factory=RedditListingData)


# --- NOAA / weather.gov -----------------------------------------------------

class NoaaAlertProperties(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event: str = ""
    severity: Optional[str] = None
    certainty: Optional[str] = None
    urgency: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None
    instruction: Optional[str] = None
    area_desc: str = Field(default="", alias="areaDesc")
    onset: Optional[datetime] = None
    expires: Optional[datetime] = None

    @field_validator("event", "area_desc", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""


class NoaaAlertFeature(BaseModel):
    id: str
    properties: NoaaAlertProperties


class FeatureCollection(BaseModel):
    features: List[Dict[str, Any]] = Field(default_factory=list)


# --- USGS earthquake catalog ------------------------------------------------

class UsgsProperties(BaseModel):
    mag: Optional[float] = None
    place: Optional[str] = None
    time: int  # epoch milliseconds
    url: Optional[str] = None
    tsunami: int = 0
    title: Optional[str] = None

    @field_validator("tsunami", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value


class UsgsGeometry(BaseModel):
    coordinates: List[float]  # [lng, lat, depth_km]

    @field_validator("coordinates")
    @classmethod
    def _three_axes(cls, value: List[float]) -> List[float]:
        if len(value) < 3:
            raise ValueError("expected [lng, lat, depth]")
        return value


class UsgsFeature(BaseModel):
    id: str
    properties: UsgsProperties
    geometry: UsgsGeometry


# --- OpenWeatherMap ---------------------------------------------------------

class OwmCondition(BaseModel):
    description: str = "Unknown"
    icon: str = "01d"
    main: str = "Clear"


class OwmMain(BaseModel):
    temp: float
    feels_like: float = 0.0
    temp_min: float = 0.0
    temp_max: float = 0.0
    humidity: int = 0
    pressure: int = 0


class OwmWind(BaseModel):
    speed: float = 0.0
    deg: float = 0.0
    gust: Optional[float] = None


class OpenWeatherCurrent(BaseModel):
    name: Optional[str] = None
    weather: List[OwmCondition] = Field(default_factory=list)
    main: OwmMain
    wind: OwmWind = Field(default_factory=OwmWind)
    visibility: Optional[int] = None


class OwmForecastItem(BaseModel):
    dt_txt: str
    main: OwmMain
    weather: List[OwmCondition] = Field(default_factory=list)
    wind: OwmWind = Field(default_factory=OwmWind)
    rain: Dict[str, float] = Field(default_factory=dict)


class OpenWeatherForecast(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[OwmForecastItem] = Field(default_factory=list, alias="list")
