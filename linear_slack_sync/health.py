"""Liveness/health HTTP surface."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from .lifecycle import ServiceState
from .utils import utc_now_iso

SERVICE_NAME = "linear-slack-sync-bot"

STATUS_PAGE = """<html>
  <head><title>Linear-Slack Sync Bot</title></head>
  <body style="font-family: Arial, sans-serif; margin: 40px;">
    <h1>Linear-Slack Sync Bot</h1>
    <p><strong>HTTP Server:</strong> Running</p>
    <p><strong>Slack Connection:</strong> {slack}</p>
    <p><strong>Uptime:</strong> {uptime} seconds</p>
    <p><a href="/health">Health Check (JSON)</a></p>
    <hr>
    <p><em>This bot automatically syncs unsynced Linear issues with Slack threads.</em></p>
  </body>
</html>
"""


def create_app(state: ServiceState, lifespan=None) -> FastAPI:
    """Build the health app; ``lifespan`` owns the Slack connection in production."""
    app = FastAPI(
        title="Linear-Slack Sync Bot",
        description="Links unsynced Linear notifications to their Slack threads",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    @app.get("/healthz")
    async def health_check():
        """Always healthy once the HTTP server is up; readiness is reported separately."""
        return {
            "status": "healthy",
            "slack_connected": state.slack_connected,
            "service": SERVICE_NAME,
            "timestamp": utc_now_iso(),
            "uptime": state.uptime_seconds,
        }

    @app.get("/", response_class=HTMLResponse)
    async def root():
        slack = "Connected" if state.slack_connected else "Connecting..."
        return STATUS_PAGE.format(slack=slack, uptime=state.uptime_seconds)

    return app
