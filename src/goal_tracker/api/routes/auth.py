"""Strava OAuth routes.

Tokens are not stored server-side; they live in httpOnly cookies that
the dashboard routes read back on every request. The OAuth state rides
in a short-lived cookie between the redirect and the callback.
"""

import logging
import secrets
import urllib.parse
from typing import Optional

import httpx
from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from ..deps import (
    ACCESS_TOKEN_COOKIE,
    ATHLETE_ID_COOKIE,
    OAUTH_STATE_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_strava_oauth_flow,
)
from ...config import Settings, get_settings
from ...integrations.base import IntegrationError
from ...integrations.strava import StravaOAuthFlow

logger = logging.getLogger(__name__)


router = APIRouter()

SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days
STATE_COOKIE_MAX_AGE = 60 * 10


class LogoutResponse(BaseModel):
    """Response from logout."""
    success: bool
    message: str


def _cookie_options(settings: Settings) -> dict:
    return {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}


def _state_matches(expected: Optional[str], received: Optional[str]) -> bool:
    if not expected or not received:
        return False
    return secrets.compare_digest(expected, received)


def _error_redirect(settings: Settings, reason: str) -> RedirectResponse:
    query = urllib.parse.urlencode({"error": reason})
    response = RedirectResponse(f"{settings.public_url}/?{query}")
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@router.get("/strava")
async def start_strava_auth(
    settings: Settings = Depends(get_settings),
    oauth: StravaOAuthFlow = Depends(get_strava_oauth_flow),
) -> RedirectResponse:
    """Redirect the browser to Strava's authorization page."""
    state = oauth.generate_state()
    response = RedirectResponse(oauth.get_authorization_url(state))
    response.set_cookie(
        OAUTH_STATE_COOKIE, state, max_age=STATE_COOKIE_MAX_AGE, **_cookie_options(settings)
    )
    return response


@router.get("/strava/callback")
async def handle_strava_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    strava_oauth_state: Optional[str] = Cookie(default=None),
    settings: Settings = Depends(get_settings),
    oauth: StravaOAuthFlow = Depends(get_strava_oauth_flow),
) -> RedirectResponse:
    """
    Exchange the authorization code and store the session in cookies.

    Redirects back to the dashboard, with `?error=` on failure.
    """
    if error:
        logger.info(f"Strava authorization declined: {error}")
        return _error_redirect(settings, error)

    if not code:
        return _error_redirect(settings, "no_code")

    if not _state_matches(strava_oauth_state, state):
        logger.warning("Strava callback state does not match the state cookie")
        return _error_redirect(settings, "invalid_state")

    try:
        credentials = await oauth.exchange_code(code)
    except (IntegrationError, httpx.HTTPError) as e:
        logger.error(f"Strava token exchange failed: {e}")
        return _error_redirect(settings, "token_exchange_failed")

    response = RedirectResponse(f"{settings.public_url}/")
    options = _cookie_options(settings)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        credentials.access_token,
        max_age=credentials.seconds_until_expiry(),
        **options,
    )
    if credentials.refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            credentials.refresh_token,
            max_age=SESSION_COOKIE_MAX_AGE,
            **options,
        )
    if credentials.user_id:
        response.set_cookie(
            ATHLETE_ID_COOKIE,
            credentials.user_id,
            max_age=SESSION_COOKIE_MAX_AGE,
            **options,
        )

    logger.info(f"Strava connected for athlete {credentials.user_id}")
    return response


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the Strava session cookies."""
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, ATHLETE_ID_COOKIE):
        response.delete_cookie(name)
    return LogoutResponse(success=True, message="Logged out")
