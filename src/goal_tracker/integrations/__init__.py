"""
External integrations for the Goal Tracker.

Provides the OAuth-based connection to Strava, the only activity source.
"""

from .base import (
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)
from .strava import (
    StravaClient,
    StravaOAuthFlow,
    fetch_activities,
)

__all__ = [
    # Base
    "AuthenticationError",
    "IntegrationError",
    "OAuthCredentials",
    "RateLimitError",
    # Strava
    "StravaClient",
    "StravaOAuthFlow",
    "fetch_activities",
]
