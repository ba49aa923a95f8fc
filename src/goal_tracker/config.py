"""Configuration settings for the Goal Tracker service."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.units import METERS_PER_MILE


# __file__ = src/goal_tracker/config.py
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Strava OAuth
    strava_client_id: str = ""
    strava_client_secret: str = ""
    strava_redirect_uri: str = "http://localhost:8000/api/auth/strava/callback"
    strava_scope: str = "read,activity:read_all"

    # Where the browser lands after the OAuth callback
    public_url: str = "http://localhost:3000"
    cookie_secure: bool = False

    # Goal pacing. Leap years are not special-cased: day 366 counts past the goal date.
    days_in_year: int = 365
    default_yearly_goal_m: float = 1000 * METERS_PER_MILE
    catch_up_weeks: list[int] = [4, 13]

    # Historical / pace analysis
    history_years: int = 5
    pace_analysis_years: int = 3
    max_analysis_years: int = 10
    max_realistic_pace_min_per_mile: float = 20.0
    date_weighted_trend: bool = False
    recent_activities_limit: int = 10

    @property
    def strava_configured(self) -> bool:
        """Whether Strava OAuth credentials are present."""
        return bool(self.strava_client_id and self.strava_client_secret)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
