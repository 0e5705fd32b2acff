"""Per-message pipeline: filter, extract, resolve, link."""

from __future__ import annotations

import logging
from typing import Optional

from .dedupe_cache import DedupeCache
from .identifier_parser import extract_identifier
from .linear_client import LinearClient
from .models import (
    InboundNotification,
    NotFound,
    SyncOutcome,
    ThreadLinkResult,
    TransientFailure,
)
from .origin_filter import OriginFilter
from .utils import build_thread_url

logger = logging.getLogger(__name__)


class SyncService:
    """Link unsynced Linear notifications to their Slack threads.

    ``handle`` is safe to call concurrently: a run only touches its own
    notification plus read-only configuration (and the optional dedupe cache,
    which is internally locked).
    """

    def __init__(
        self,
        origin_filter: OriginFilter,
        linear_client: LinearClient,
        workspace: str,
        slack_domain: str = "slack.com",
        dedupe_cache: Optional[DedupeCache] = None,
        dry_run: bool = False,
    ) -> None:
        self.origin_filter = origin_filter
        self.linear_client = linear_client
        self.workspace = workspace
        self.slack_domain = slack_domain
        self.dedupe_cache = dedupe_cache
        self.dry_run = dry_run

    def handle(self, notification: InboundNotification) -> SyncOutcome:
        """Run the pipeline for one message; never raises for per-message problems."""
        run = _Run()
        try:
            return self._handle(notification, run)
        except Exception:
            logger.exception(
                "Unexpected error syncing message %s in channel %s",
                notification.timestamp,
                notification.channel_id,
            )
            if run.link_attempted:
                return SyncOutcome.LINK_FAILED
            self._release(notification, run)
            return SyncOutcome.RESOLVE_FAILED

    def _handle(self, notification: InboundNotification, run: _Run) -> SyncOutcome:
        if not self.origin_filter.is_eligible(notification.sender_id):
            logger.debug(
                "Ignoring message %s from sender %s", notification.timestamp, notification.sender_id
            )
            return SyncOutcome.IGNORED

        logger.info("Unsynced Linear issue detected from bot: %s", notification.sender_id)

        identifier = extract_identifier(notification)
        if identifier is None:
            logger.debug(
                "No issue identifier in message %s in channel %s",
                notification.timestamp,
                notification.channel_id,
            )
            return SyncOutcome.NO_IDENTIFIER

        if self.dedupe_cache is not None and not self.dedupe_cache.claim(
            notification.channel_id, notification.timestamp
        ):
            logger.info(
                "Already processed message %s for %s; skipping", notification.timestamp, identifier
            )
            return SyncOutcome.DUPLICATE
        run.claimed = self.dedupe_cache is not None

        logger.info("Processing issue: %s", identifier)

        issue = self.linear_client.get_issue(identifier)
        if isinstance(issue, NotFound):
            logger.warning("Linear issue not found: %s", identifier)
            self._release(notification, run)
            return SyncOutcome.NOT_FOUND
        if isinstance(issue, TransientFailure):
            logger.error("Failed to resolve Linear issue %s: %s", identifier, issue.reason)
            self._release(notification, run)
            return SyncOutcome.RESOLVE_FAILED

        thread_url = build_thread_url(
            self.workspace, notification.channel_id, notification.timestamp, self.slack_domain
        )

        if self.dry_run:
            logger.warning(
                "[DRY-RUN] Would link %s (%s) to Slack thread %s", identifier, issue.id, thread_url
            )
            return SyncOutcome.DRY_RUN

        run.link_attempted = True
        result = self.linear_client.link_slack_thread(issue.id, thread_url)
        if isinstance(result, ThreadLinkResult) and result.success:
            logger.info(
                "Successfully synced: %s -> Slack thread %s (attachment %s)",
                identifier,
                thread_url,
                result.attachment_id,
            )
            return SyncOutcome.LINKED

        reason = result.reason if isinstance(result, TransientFailure) else "success=false"
        logger.error(
            "Failed to sync %s (issue id %s) with %s: %s", identifier, issue.id, thread_url, reason
        )
        return SyncOutcome.LINK_FAILED

    def _release(self, notification: InboundNotification, run: _Run) -> None:
        # Nothing was sent to Linear yet, so a redelivery may be tried again.
        if run.claimed and self.dedupe_cache is not None:
            self.dedupe_cache.release(notification.channel_id, notification.timestamp)
            run.claimed = False


class _Run:
    """Progress of a single ``handle`` call."""

    def __init__(self) -> None:
        self.claimed = False
        self.link_attempted = False
