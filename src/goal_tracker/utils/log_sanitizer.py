"""Keep Strava credentials out of log output.

Access tokens ride in cookies and Authorization headers on every
dashboard request; the refresh token, client secret and authorization
code pass through the OAuth callback. Anything that looks like one of
them is replaced before a record reaches a handler.

Usage:
    from goal_tracker.utils.log_sanitizer import install_log_sanitizer

    install_log_sanitizer()
"""

import logging
import re
from typing import Any, Optional

REDACTED = "[REDACTED]"

# Field names whose value is always secret, wherever they appear
SECRET_FIELDS = (
    "strava_access_token",
    "strava_refresh_token",
    "access_token",
    "refresh_token",
    "client_secret",
)

_ASSIGNMENT = r'(["\']?\s*[:=]\s*["\']?)'

# Applied in order; the bearer rule runs before the header rule
_RULES = (
    (re.compile(r"Bearer\s+[\w\-.]+", re.IGNORECASE), "Bearer [REDACTED_TOKEN]"),
    (re.compile(r"(Authorization" + _ASSIGNMENT + r")[^\"'&\s]+", re.IGNORECASE),
     r"\1" + REDACTED),
    (re.compile(r"\b(" + "|".join(SECRET_FIELDS) + r")" + _ASSIGNMENT + r"[^\"';&\s]+",
                re.IGNORECASE),
     r"\1\2" + REDACTED),
    # Authorization codes are long; short `code=` values are status codes
    (re.compile(r"\b(code" + _ASSIGNMENT + r")[\w\-]{20,}", re.IGNORECASE), r"\1" + REDACTED),
    # Strava tokens are 40 hex characters
    (re.compile(r"\b[a-fA-F0-9]{32,}\b"), "[REDACTED_HEX_TOKEN]"),
)


def sanitize_string(text: str) -> str:
    """Redact credentials from a string, e.g. an error message bound for a client."""
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text


def sanitize_value(value: Any) -> Any:
    """Redact credentials inside log arguments, walking tuples, lists and dicts.

    Values without a secret in their text form come back unchanged, so
    `%d` and friends still receive numbers.
    """
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, tuple):
        return tuple(sanitize_value(item) for item in value)
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}

    text = str(value)
    cleaned = sanitize_string(text)
    return value if cleaned == text else cleaned


class LogSanitizationFilter(logging.Filter):
    """Redacts credentials from a record's message and arguments; never drops it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = sanitize_string(str(record.msg))
        if record.args:
            record.args = sanitize_value(record.args)
        return True


def install_log_sanitizer(logger_name: Optional[str] = None) -> None:
    """Attach a LogSanitizationFilter.

    Args:
        logger_name: Only this logger when given; otherwise the root logger
                     and every handler already attached to it.
    """
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return

    root = logging.getLogger()
    root.addFilter(sanitizer)
    for handler in root.handlers:
        handler.addFilter(sanitizer)
