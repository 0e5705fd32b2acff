"""Recover the Linear issue identifier from a notification's section text.

Linear's notification layout renders the issue as a Slack link,
``<https://linear.app/acme/issue/PROJ-42/fix-bug|PROJ-42 Fix bug>``. Parsing
happens in two stages so each can fail on its own: first the visible label of
the link is located, then the identifier is matched at the start of that label.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import InboundNotification

LINK_LABEL_RE = re.compile(r"\|([^>]+)>")
ISSUE_IDENTIFIER_RE = re.compile(r"^([A-Z]+-\d+)")


def find_link_label(text: Optional[str]) -> Optional[str]:
    """Return the label of the first ``<url|label>`` span, if any."""
    if not text:
        return None
    match = LINK_LABEL_RE.search(text)
    if not match:
        return None
    return match.group(1)


def match_issue_identifier(label: Optional[str]) -> Optional[str]:
    """Return the ``ABC-123`` token the label starts with, if any."""
    if not label:
        return None
    match = ISSUE_IDENTIFIER_RE.match(label)
    if not match:
        return None
    return match.group(1)


def section_text(notification: InboundNotification) -> Optional[str]:
    for block in notification.blocks:
        if block.is_section and block.text:
            return block.text
    return None


def extract_identifier(notification: InboundNotification) -> Optional[str]:
    """Return the issue identifier announced by the notification, or None."""
    return match_issue_identifier(find_link_label(section_text(notification)))
