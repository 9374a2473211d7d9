from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "OceanGuard Hazard Intelligence API"
    # If ALLOWED_ORIGINS env is provided, it should be a JSON array.
    # Example: ["http://localhost:5173", "http://127.0.0.1:5173"]
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Reddit (public JSON listings, no OAuth)
    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = "OceanGuard:v1.0.0 (by /u/oceanguard)"
    reddit_communities: List[str] = Field(default_factory=lambda: [
        "environment", "ocean", "marinebiology", "climatechange", "pollution", "collapse",
    ])
    # Only the first N communities are queried per call to stay under rate limits
    reddit_max_communities: int = 2
    reddit_posts_per_community: int = 25
    reddit_timeout_seconds: float = 5.0
    reddit_request_delay_seconds: float = 2.0
    reddit_max_posts: int = 20

    # Government feeds
    noaa_base_url: str = "https://api.weather.gov"
    noaa_user_agent: str = "OceanGuard-App/1.0 (contact@oceanguard.com)"
    noaa_max_alerts: int = 20
    usgs_base_url: str = "https://earthquake.usgs.gov"
    usgs_user_agent: str = "OceanGuard-App/1.0"
    usgs_min_magnitude: float = 4.5
    usgs_query_limit: int = 50
    usgs_max_alerts: int = 15
    alerts_timeout_seconds: float = 10.0

    # OpenWeatherMap
    openweather_api_key: Optional[str] = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    weather_timeout_seconds: float = 10.0

    # Local hazard reports (read-only)
    recent_report_limit: int = 50
    # Optional JSON file used to seed the in-memory report store
    hazard_reports_file: Optional[str] = None

    # 0 disables caching; otherwise results are at most this many seconds stale
    analytics_cache_ttl_seconds: float = 0.0
    alerts_cache_ttl_seconds: float = 0.0


settings = Settings()
