"""
Errors and credentials shared by the activity-provider integration.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class IntegrationError(Exception):
    """A call to the activity provider failed."""

    def __init__(self, message: str, provider: str = "", code: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.code = code


class AuthenticationError(IntegrationError):
    """The provider rejected the access token or the authorization code."""


class RateLimitError(IntegrationError):
    """The provider kept answering 429 after every retry."""

    def __init__(self, message: str, provider: str, retry_after: Optional[int] = None):
        super().__init__(message, provider, "rate_limit")
        self.retry_after = retry_after


@dataclass
class OAuthCredentials:
    """Tokens returned by an authorization-code exchange."""

    provider: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"
    user_id: Optional[str] = None     # athlete id
    user_name: Optional[str] = None

    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> Optional[int]:
        """Remaining token lifetime in whole seconds, never negative."""
        if self.expires_at is None:
            return None
        remaining = self.expires_at - (now or datetime.now())
        return max(0, int(remaining.total_seconds()))
