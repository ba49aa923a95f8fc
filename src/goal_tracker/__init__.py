"""Yearly distance goal tracking and pace trend analysis for Strava athletes."""

__version__ = "0.1.0"
