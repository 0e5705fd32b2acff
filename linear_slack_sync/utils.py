"""Utility helpers shared across modules."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any


def build_thread_url(workspace: str, channel_id: str, timestamp: str, domain: str = "slack.com") -> str:
    """Permalink for a Slack message: the ``ts`` with its dot removed, prefixed with ``p``."""
    return f"https://{workspace}.{domain}/archives/{channel_id}/p{timestamp.replace('.', '')}"


def utc_now_iso() -> str:
    """Return the current time as an ISO string with a trailing Z."""
    return datetime.now(tz=UTC).isoformat().replace("+00:00", "Z")


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """Escape control characters and cap length of untrusted text before logging."""
    if not isinstance(value, str):
        value = str(value)

    sanitized = (
        value.replace("\r", "\\r")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\x00", "\\x00")
    )
    sanitized = re.sub(r"[\x01-\x08\x0b-\x0c\x0e-\x1f]", "", sanitized)

    if len(sanitized) > max_length:
        truncated_count = len(sanitized) - max_length
        sanitized = sanitized[:max_length] + f"...[truncated {truncated_count} chars]"
    return sanitized
