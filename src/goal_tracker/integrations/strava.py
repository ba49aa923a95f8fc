"""
Strava API v3 access for one athlete.

Covers the OAuth authorization-code exchange and the read-only calls the
dashboard makes: the athlete profile, aggregate stats and activities
inside a time window.
"""

import asyncio
import logging
import secrets
import urllib.parse
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..models.activity import Activity
from .base import (
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)

logger = logging.getLogger(__name__)

PROVIDER = "strava"


class StravaOAuthFlow:
    """
    Strava's OAuth 2.0 authorization-code flow.

    Usage:
        oauth = StravaOAuthFlow(client_id, client_secret, redirect_uri)
        state = oauth.generate_state()
        redirect_to(oauth.get_authorization_url(state))
        # on callback, after checking state:
        credentials = await oauth.exchange_code(code)
    """

    authorize_url = "https://www.strava.com/oauth/authorize"
    token_url = "https://www.strava.com/oauth/token"

    # Read-only access is all the dashboard needs
    DEFAULT_SCOPE = "read,activity:read_all"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scope: Optional[str] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope or self.DEFAULT_SCOPE

    @staticmethod
    def generate_state() -> str:
        """Random value echoed back on the callback to tie it to this browser."""
        return secrets.token_urlsafe(32)

    def get_authorization_url(self, state: str) -> str:
        """URL of Strava's consent page for this app."""
        query = urllib.parse.urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "approval_prompt": "auto",
            "scope": self.scope,
            "state": state,
        })
        return f"{self.authorize_url}?{query}"

    async def exchange_code(self, code: str) -> OAuthCredentials:
        """
        Trade an authorization code for tokens.

        Raises:
            AuthenticationError: If Strava refuses the code
        """
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
        }
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(self.token_url, data=form)

        if response.status_code != 200:
            raise AuthenticationError(
                _error_message(response, "Token exchange failed"), PROVIDER
            )
        return _credentials_from_token(response.json())


def _credentials_from_token(payload: Dict[str, Any]) -> OAuthCredentials:
    athlete = payload.get("athlete") or {}
    full_name = " ".join(
        part for part in (athlete.get("firstname"), athlete.get("lastname")) if part
    )
    expires_at = payload.get("expires_at")

    return OAuthCredentials(
        provider=PROVIDER,
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_at=datetime.fromtimestamp(expires_at) if expires_at else None,
        user_id=str(athlete["id"]) if athlete.get("id") else None,
        user_name=full_name or None,
    )


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Strava's `message` field when the body is JSON, else a status line."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"{fallback}: HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"{fallback}: HTTP {response.status_code}"


class StravaClient:
    """
    Read-only client for Strava API v3.

    Strava allows 200 requests per 15 minutes and 2,000 per day; a 429 is
    retried after the advertised delay, at most a minute per wait.

    Usage:
        async with StravaClient(credentials) as client:
            activities = await client.list_activities(start, end)
    """

    base_url = "https://www.strava.com/api/v3"

    MAX_PER_PAGE = 200
    MAX_PAGES = 20
    MAX_ATTEMPTS = 3
    MAX_RETRY_WAIT = 60
    # Strava's short rate-limit window
    DEFAULT_RETRY_AFTER = 900

    def __init__(
        self,
        credentials: OAuthCredentials,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if credentials.provider != PROVIDER:
            raise ValueError("Credentials must be for Strava")
        self.credentials = credentials
        self._http_client = http_client

    @classmethod
    def from_access_token(
        cls,
        access_token: str,
        athlete_id: Optional[str] = None,
    ) -> "StravaClient":
        """Client for a bare access token, as read from the session cookie."""
        return cls(OAuthCredentials(provider=PROVIDER, access_token=access_token, user_id=athlete_id))

    async def close(self) -> None:
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()
        self._http_client = None

    async def __aenter__(self) -> "StravaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET an endpoint and return its decoded JSON body.

        Raises:
            AuthenticationError: On 401
            RateLimitError: When 429 persists through every attempt
            IntegrationError: On any other failure, including an undecodable body
        """
        headers = {"Authorization": self.credentials.authorization_header()}

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            response = await self._client().get(
                f"{self.base_url}{endpoint}", headers=headers, params=params
            )
            if response.status_code != 429:
                return self._decode(response, endpoint)

            retry_after = int(response.headers.get("Retry-After", self.DEFAULT_RETRY_AFTER))
            if attempt == self.MAX_ATTEMPTS:
                raise RateLimitError(
                    "Strava rate limit exceeded. Please wait before retrying.",
                    PROVIDER,
                    retry_after,
                )
            wait = min(retry_after, self.MAX_RETRY_WAIT)
            logger.warning(f"Strava returned 429 for {endpoint}, attempt {attempt}; waiting {wait}s")
            await asyncio.sleep(wait)

    @staticmethod
    def _decode(response: httpx.Response, endpoint: str) -> Any:
        status = response.status_code
        if status == 401:
            raise AuthenticationError("Token expired or invalid. Please re-authenticate.", PROVIDER)
        if status == 404:
            raise IntegrationError(f"Resource not found: {endpoint}", PROVIDER, "not_found")
        if status != 200:
            raise IntegrationError(
                f"Strava API error: {_error_message(response, 'Request failed')}",
                PROVIDER,
                str(status),
            )
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationError(
                f"Strava returned an unreadable body for {endpoint}", PROVIDER, "bad_response"
            ) from e

    async def get_athlete(self) -> Dict[str, Any]:
        """The authenticated athlete's profile."""
        return await self._get("/athlete")

    async def get_athlete_stats(self, athlete_id: Optional[str] = None) -> Dict[str, Any]:
        """Recent, year-to-date and all-time totals for an athlete."""
        athlete_id = athlete_id or self.credentials.user_id
        if not athlete_id:
            raise IntegrationError("Athlete ID required for stats", PROVIDER, "missing_athlete_id")
        return await self._get(f"/athletes/{athlete_id}/stats")

    async def get_activities(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        per_page: int = MAX_PER_PAGE,
        page: int = 1,
    ) -> List[Activity]:
        """
        One page of activities started inside the window.

        Entries Strava returns without the fields an Activity needs are skipped.
        """
        params: Dict[str, Any] = {"per_page": min(per_page, self.MAX_PER_PAGE), "page": page}
        if start_date:
            params["after"] = int(start_date.timestamp())
        if end_date:
            params["before"] = int(end_date.timestamp())

        payload = await self._get("/athlete/activities", params)
        if not isinstance(payload, list):
            return []

        activities = []
        for item in payload:
            try:
                activities.append(Activity.from_api_response(item))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skipping activity {item.get('id')}: {e}")
        return activities

    async def list_activities(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Activity]:
        """Every activity in the window, paging until a short page."""
        collected: List[Activity] = []
        for page in range(1, self.MAX_PAGES + 1):
            batch = await self.get_activities(start_date, end_date, self.MAX_PER_PAGE, page)
            collected.extend(batch)
            if len(batch) < self.MAX_PER_PAGE:
                break
        else:
            logger.warning(f"Stopped paging Strava activities after {self.MAX_PAGES} pages")
        return collected


async def fetch_activities(
    access_token: str,
    start_epoch: int,
    end_epoch: int,
) -> List[Activity]:
    """All activities between two epoch-second bounds, using a bare token."""
    async with StravaClient.from_access_token(access_token) as client:
        return await client.list_activities(
            datetime.fromtimestamp(start_epoch),
            datetime.fromtimestamp(end_epoch),
        )
