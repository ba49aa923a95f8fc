"""Dependency injection for API routes."""

from datetime import date
from typing import AsyncIterator, Optional

from fastapi import Cookie, Depends

from ..config import Settings, get_settings
from ..exceptions import NotAuthenticatedError, StravaNotConfiguredError
from ..integrations.strava import StravaClient, StravaOAuthFlow
from ..services.dashboard import ActivitySource, DashboardService

ACCESS_TOKEN_COOKIE = "strava_access_token"
REFRESH_TOKEN_COOKIE = "strava_refresh_token"
ATHLETE_ID_COOKIE = "strava_athlete_id"
OAUTH_STATE_COOKIE = "strava_oauth_state"


def get_today() -> date:
    """Current date, overridable in tests."""
    return date.today()


def get_access_token(
    strava_access_token: Optional[str] = Cookie(default=None),
) -> str:
    """Access token from the session cookie."""
    if not strava_access_token:
        raise NotAuthenticatedError()
    return strava_access_token


def get_athlete_id(
    strava_athlete_id: Optional[str] = Cookie(default=None),
) -> str:
    """Athlete id from the session cookie, required for stats."""
    if not strava_athlete_id:
        raise NotAuthenticatedError()
    return strava_athlete_id


def get_strava_oauth_flow(settings: Settings = Depends(get_settings)) -> StravaOAuthFlow:
    """Create a Strava OAuth flow instance."""
    if not settings.strava_configured:
        raise StravaNotConfiguredError()
    return StravaOAuthFlow(
        client_id=settings.strava_client_id,
        client_secret=settings.strava_client_secret,
        redirect_uri=settings.strava_redirect_uri,
        scope=settings.strava_scope,
    )


async def get_activity_source(
    access_token: str = Depends(get_access_token),
    strava_athlete_id: Optional[str] = Cookie(default=None),
) -> AsyncIterator[ActivitySource]:
    """Request-scoped Strava client, closed after the response."""
    client = StravaClient.from_access_token(access_token, strava_athlete_id)
    try:
        yield client
    finally:
        await client.close()


def get_dashboard_service(
    source: ActivitySource = Depends(get_activity_source),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    """Get the dashboard service for the current athlete."""
    return DashboardService(source, settings)
