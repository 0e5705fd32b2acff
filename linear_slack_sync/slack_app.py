"""Slack Bolt wiring: turn message events into pipeline runs."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from slack_bolt import App

from .config import Settings
from .lifecycle import InFlightTracker
from .models import Block, InboundNotification
from .sync_service import SyncService

logger = logging.getLogger(__name__)

MENTION_REPLY = (
    "Hello <@{user}>! I'm automatically syncing unsynced Linear issues with Slack threads."
)


def message_event_to_notification(event: Mapping[str, Any]) -> InboundNotification:
    """Build the pipeline input from a raw Slack ``message`` event.

    Linear puts its notification blocks in the first legacy attachment.
    """
    blocks: list[Block] = []
    attachments = event.get("attachments") or []
    if attachments and isinstance(attachments[0], Mapping):
        for raw in attachments[0].get("blocks") or []:
            if not isinstance(raw, Mapping):
                continue
            text = raw.get("text")
            blocks.append(
                Block(
                    type=str(raw.get("type", "")),
                    text=text.get("text") if isinstance(text, Mapping) else None,
                )
            )

    return InboundNotification(
        sender_id=event.get("bot_id"),
        channel_id=event.get("channel", ""),
        timestamp=event.get("ts", ""),
        blocks=tuple(blocks),
    )


def register_listeners(
    app: App, sync_service: SyncService, tracker: Optional[InFlightTracker] = None
) -> None:
    """Attach the message and app_mention listeners to a Bolt app."""

    def on_message(event: dict) -> None:
        notification = message_event_to_notification(event)
        if tracker is None:
            sync_service.handle(notification)
            return
        with tracker.track():
            sync_service.handle(notification)

    def on_app_mention(event: dict, say) -> None:
        user = event.get("user")
        logger.info("Bot mentioned by user: %s", user)
        say(MENTION_REPLY.format(user=user))

    app.event("message")(on_message)
    app.event("app_mention")(on_app_mention)


def create_slack_app(settings: Settings) -> App:
    """Create the Bolt app; this verifies the bot token against Slack."""
    kwargs: dict[str, Any] = {"token": settings.slack_bot_token}
    if settings.slack_signing_secret:
        kwargs["signing_secret"] = settings.slack_signing_secret
    return App(**kwargs)
