"""Tests for the Strava integration."""

import json
from datetime import datetime, timedelta
from typing import Callable, List
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from goal_tracker.integrations.base import (
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)
from goal_tracker.integrations.strava import (
    StravaClient,
    StravaOAuthFlow,
    fetch_activities,
)


def activity_payload(id: int, day: int = 1) -> dict:
    return {
        "id": id,
        "name": f"Run {id}",
        "type": "Run",
        "sport_type": "Run",
        "start_date": f"2024-01-{day:02d}T12:00:00Z",
        "start_date_local": f"2024-01-{day:02d}T07:00:00Z",
        "distance": 5000.0,
        "moving_time": 1500,
        "elapsed_time": 1550,
    }


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestStravaOAuthFlow:
    """Tests for StravaOAuthFlow."""

    @pytest.fixture
    def oauth_flow(self):
        """Create OAuth flow instance."""
        return StravaOAuthFlow(
            client_id="test_client_id",
            client_secret="test_client_secret",
            redirect_uri="http://localhost:8000/api/auth/strava/callback",
        )

    def test_default_scope(self, oauth_flow):
        """Test default scope is read-only."""
        assert oauth_flow.scope == "read,activity:read_all"

    def test_custom_scope(self):
        flow = StravaOAuthFlow("id", "secret", "http://localhost/cb", scope="read")
        assert flow.scope == "read"

    def test_authorization_url(self, oauth_flow):
        """Test authorization URL generation."""
        url = oauth_flow.get_authorization_url(state="abc")
        parsed = urlparse(url)
        params = parse_qs(parsed.query)

        assert url.startswith("https://www.strava.com/oauth/authorize")
        assert params["client_id"] == ["test_client_id"]
        assert params["redirect_uri"] == ["http://localhost:8000/api/auth/strava/callback"]
        assert params["response_type"] == ["code"]
        assert params["approval_prompt"] == ["auto"]
        assert params["scope"] == ["read,activity:read_all"]
        assert params["state"] == ["abc"]

    def test_state_generation(self, oauth_flow):
        """Each call generates a new, URL-safe state."""
        state = StravaOAuthFlow.generate_state()

        assert state != StravaOAuthFlow.generate_state()
        assert len(state) >= 32

    @pytest.mark.asyncio
    async def test_exchange_code(self, oauth_flow):
        """Test code exchange against a mocked token endpoint."""
        expires_at = int((datetime.now() + timedelta(hours=6)).timestamp())
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={
                "access_token": "new_access",
                "refresh_token": "new_refresh",
                "expires_at": expires_at,
                "athlete": {"id": 42, "firstname": "Test", "lastname": "Athlete"},
            })

        real_client = httpx.AsyncClient
        with patch(
            "goal_tracker.integrations.strava.httpx.AsyncClient",
            side_effect=lambda *args, **kwargs: real_client(transport=httpx.MockTransport(handler)),
        ):
            credentials = await oauth_flow.exchange_code("auth_code")

        assert seen["url"] == "https://www.strava.com/oauth/token"
        assert seen["body"]["code"] == ["auth_code"]
        assert seen["body"]["grant_type"] == ["authorization_code"]
        assert credentials.provider == "strava"
        assert credentials.access_token == "new_access"
        assert credentials.refresh_token == "new_refresh"
        assert credentials.user_id == "42"
        assert credentials.user_name == "Test Athlete"
        assert credentials.expires_at == datetime.fromtimestamp(expires_at)

    @pytest.mark.asyncio
    async def test_exchange_code_failure(self, oauth_flow):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Bad Request"})

        real_client = httpx.AsyncClient
        with patch(
            "goal_tracker.integrations.strava.httpx.AsyncClient",
            side_effect=lambda *args, **kwargs: real_client(transport=httpx.MockTransport(handler)),
        ):
            with pytest.raises(AuthenticationError) as exc:
                await oauth_flow.exchange_code("bad_code")

        assert "Bad Request" in str(exc.value)


class TestStravaClient:
    """Tests for StravaClient."""

    @pytest.fixture
    def credentials(self):
        """Create Strava credentials."""
        return OAuthCredentials(
            provider="strava",
            access_token="test_access_token",
            user_id="12345",
        )

    def test_wrong_provider_rejected(self):
        """Test that wrong provider credentials are rejected."""
        wrong_creds = OAuthCredentials(provider="garmin", access_token="token")

        with pytest.raises(ValueError) as exc:
            StravaClient(wrong_creds)

        assert "Strava" in str(exc.value)

    @pytest.mark.asyncio
    async def test_close_without_requests(self, credentials):
        client = StravaClient(credentials)

        await client.close()

        assert client._http_client is None

    def test_from_access_token(self):
        client = StravaClient.from_access_token("cookie_token", "99")

        assert client.credentials.access_token == "cookie_token"
        assert client.credentials.user_id == "99"

    @pytest.mark.asyncio
    async def test_get_activities(self, credentials):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[activity_payload(1), activity_payload(2, day=2)])

        start = datetime(2024, 1, 1)
        end = datetime(2024, 12, 31, 23, 59, 59)
        async with StravaClient(credentials, mock_http_client(handler)) as client:
            activities = await client.get_activities(start, end, per_page=50, page=2)

        assert [a.id for a in activities] == [1, 2]
        assert activities[0].start_date_local == datetime(2024, 1, 1, 7, 0)

        request = requests[0]
        assert request.url.path == "/api/v3/athlete/activities"
        assert request.headers["Authorization"] == "Bearer test_access_token"
        assert request.url.params["after"] == str(int(start.timestamp()))
        assert request.url.params["before"] == str(int(end.timestamp()))
        assert request.url.params["per_page"] == "50"
        assert request.url.params["page"] == "2"

    @pytest.mark.asyncio
    async def test_per_page_capped(self, credentials):
        pages = []

        def handler(request: httpx.Request) -> httpx.Response:
            pages.append(request.url.params["per_page"])
            return httpx.Response(200, json=[])

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            await client.get_activities(per_page=1000)

        assert pages == ["200"]

    @pytest.mark.asyncio
    async def test_skips_unparseable_activities(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[activity_payload(1), {"id": 2}])

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            activities = await client.get_activities()

        assert [a.id for a in activities] == [1]

    @pytest.mark.asyncio
    async def test_list_activities_follows_pages(self, credentials):
        """Paging stops at the first page shorter than the page size."""
        pages_requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            pages_requested.append(page)
            if page == 1:
                return httpx.Response(200, json=[activity_payload(i) for i in range(200)])
            return httpx.Response(200, json=[activity_payload(1000 + i) for i in range(3)])

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            activities = await client.list_activities(datetime(2024, 1, 1), datetime(2024, 12, 31))

        assert len(activities) == 203
        assert pages_requested == [1, 2]

    @pytest.mark.asyncio
    async def test_list_activities_is_bounded(self, credentials):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[activity_payload(i) for i in range(200)])

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            activities = await client.list_activities()

        assert len(calls) == StravaClient.MAX_PAGES
        assert len(activities) == 200 * StravaClient.MAX_PAGES

    @pytest.mark.asyncio
    async def test_unauthorized(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Authorization Error"})

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            with pytest.raises(AuthenticationError):
                await client.get_athlete()

    @pytest.mark.asyncio
    async def test_not_found(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            with pytest.raises(IntegrationError) as exc:
                await client.get_athlete()

        assert exc.value.code == "not_found"

    @pytest.mark.asyncio
    async def test_server_error(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "Internal Error"})

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            with pytest.raises(IntegrationError) as exc:
                await client.get_athlete()

        assert exc.value.code == "500"
        assert "Internal Error" in str(exc.value)

    @pytest.mark.asyncio
    async def test_rate_limit_retry(self, credentials):
        """A 429 is retried after the Retry-After delay."""
        responses = [
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"id": 12345}),
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        sleep = AsyncMock()
        with patch("goal_tracker.integrations.strava.asyncio.sleep", sleep):
            async with StravaClient(credentials, mock_http_client(handler)) as client:
                athlete = await client.get_athlete()

        assert athlete == {"id": 12345}
        sleep.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "120"})

        sleep = AsyncMock()
        with patch("goal_tracker.integrations.strava.asyncio.sleep", sleep):
            async with StravaClient(credentials, mock_http_client(handler)) as client:
                with pytest.raises(RateLimitError) as exc:
                    await client.get_athlete()

        assert exc.value.retry_after == 120
        # Waits are capped at a minute
        assert [c.args[0] for c in sleep.await_args_list] == [60, 60]

    @pytest.mark.asyncio
    async def test_undecodable_body(self, credentials):
        """A 200 whose body is not JSON surfaces as an integration failure."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>maintenance</html>")

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            with pytest.raises(IntegrationError) as exc:
                await client.get_athlete()

        assert exc.value.code == "bad_response"
        assert isinstance(exc.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_athlete_stats(self, credentials):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, content=json.dumps({"ytd_run_totals": {"count": 5}}))

        async with StravaClient(credentials, mock_http_client(handler)) as client:
            stats = await client.get_athlete_stats()
            await client.get_athlete_stats("777")

        assert stats["ytd_run_totals"]["count"] == 5
        assert paths == ["/api/v3/athletes/12345/stats", "/api/v3/athletes/777/stats"]

    @pytest.mark.asyncio
    async def test_athlete_stats_requires_id(self):
        client = StravaClient.from_access_token("token")

        with pytest.raises(IntegrationError) as exc:
            await client.get_athlete_stats()

        assert exc.value.code == "missing_athlete_id"


class TestFetchActivities:
    """Tests for the module-level fetch helper."""

    @pytest.mark.asyncio
    async def test_converts_epoch_bounds(self):
        start = datetime(2024, 1, 1)
        end = datetime(2024, 12, 31, 23, 59, 59)
        list_activities = AsyncMock(return_value=[])

        with patch.object(StravaClient, "list_activities", list_activities):
            result = await fetch_activities(
                "token", int(start.timestamp()), int(end.timestamp())
            )

        assert result == []
        list_activities.assert_awaited_once_with(start, end)
