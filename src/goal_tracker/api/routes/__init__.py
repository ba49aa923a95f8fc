"""API route modules."""

from . import auth, strava

__all__ = ["auth", "strava"]
