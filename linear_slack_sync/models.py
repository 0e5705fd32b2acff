"""Typed containers shared across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

SECTION_BLOCK = "section"


@dataclass(frozen=True)
class Block:
    """One rich content block of a notification attachment."""

    type: str
    text: Optional[str] = None

    @property
    def is_section(self) -> bool:
        return self.type == SECTION_BLOCK


@dataclass(frozen=True)
class InboundNotification:
    """Essential fields of a Slack message event."""

    sender_id: Optional[str]
    channel_id: str
    timestamp: str
    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class TrackerIssueRef:
    """A Linear issue as returned by the lookup query."""

    id: str
    identifier: str
    title: str


@dataclass(frozen=True)
class ThreadLinkResult:
    """Outcome of the attachmentLinkSlack mutation."""

    success: bool
    attachment_id: Optional[str] = None


@dataclass(frozen=True)
class NotFound:
    """Linear reported no issue for the identifier."""

    identifier: str


@dataclass(frozen=True)
class TransientFailure:
    """Network, transport, or payload-shape failure talking to Linear."""

    reason: str
    detail: Any = field(default=None, compare=False)


class SyncOutcome(str, Enum):
    """Which branch a single pipeline run ended on."""

    IGNORED = "ignored"
    NO_IDENTIFIER = "no_identifier"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    RESOLVE_FAILED = "resolve_failed"
    DRY_RUN = "dry_run"
    LINKED = "linked"
    LINK_FAILED = "link_failed"
