"""Entry point that links unsynced Linear notifications to their Slack threads."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn
from slack_bolt.adapter.socket_mode import SocketModeHandler

from linear_slack_sync.config import Settings
from linear_slack_sync.dedupe_cache import DedupeCache
from linear_slack_sync.health import create_app
from linear_slack_sync.lifecycle import InFlightTracker, ServiceState, slack_lifespan
from linear_slack_sync.linear_client import LinearClient
from linear_slack_sync.origin_filter import OriginFilter
from linear_slack_sync.slack_app import create_slack_app, register_listeners
from linear_slack_sync.sync_service import SyncService

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Link unsynced Linear notifications to Slack threads.")
    parser.add_argument("--dry-run", action="store_true", help="Resolve issues but do not link them")
    parser.add_argument("--host", help="Health server bind address (overrides HOST)")
    parser.add_argument("--port", type=int, help="Health server port (overrides PORT)")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    configure_logging(settings.log_level)

    dedupe_cache = None
    if settings.dedupe_enabled:
        dedupe_cache = DedupeCache(settings.dedupe_window_seconds, settings.dedupe_max_entries)

    sync_service = SyncService(
        origin_filter=OriginFilter(settings.unsynced_emitter_ids),
        linear_client=LinearClient(settings),
        workspace=settings.slack_workspace_name,
        slack_domain=settings.slack_domain,
        dedupe_cache=dedupe_cache,
        dry_run=args.dry_run,
    )

    try:
        slack_app = create_slack_app(settings)
    except Exception as exc:
        logging.error("Failed to start bot: %s", exc)
        raise SystemExit(1) from exc

    state = ServiceState()
    tracker = InFlightTracker()
    register_listeners(slack_app, sync_service, tracker)
    handler = SocketModeHandler(slack_app, settings.slack_app_token)

    app = create_app(
        state,
        lifespan=slack_lifespan(handler, state, tracker, settings.shutdown_grace_seconds),
    )

    logging.info(
        "Watching for unsynced Linear notifications from %s bot id(s)%s",
        len(settings.unsynced_emitter_ids),
        " [DRY-RUN]" if args.dry_run else "",
    )
    # uvicorn exits non-zero itself when the port cannot be bound or startup fails.
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=int(settings.shutdown_grace_seconds) or None,
    )


if __name__ == "__main__":
    main()
