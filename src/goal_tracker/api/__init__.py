"""HTTP API for the Goal Tracker."""
