from unittest.mock import Mock

import pytest

from linear_slack_sync.config import Settings
from linear_slack_sync.linear_client import LinearClient
from linear_slack_sync.models import Block, InboundNotification

LINEAR_BOT_ID = "B0LINEAR"


@pytest.fixture()
def settings(monkeypatch) -> Settings:
    for name in ("UNSYNCED_EMITTER_IDS", "UNSYNCED_LINEAR_BOT_IDS", "DEDUPE_WINDOW_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return Settings(
        _env_file=None,
        SLACK_BOT_TOKEN="xoxb-test",
        SLACK_APP_TOKEN="xapp-test",
        SLACK_WORKSPACE_NAME="acme",
        LINEAR_API_KEY="lin_api_test",
        UNSYNCED_EMITTER_IDS=LINEAR_BOT_ID,
    )


@pytest.fixture()
def make_notification():
    def _make(
        text="<https://linear.app/acme/issue/PROJ-42/fix-bug|PROJ-42 Fix bug>",
        sender_id=LINEAR_BOT_ID,
        channel_id="C123",
        timestamp="1700000000.000100",
        blocks=None,
    ) -> InboundNotification:
        if blocks is None:
            blocks = (Block(type="section", text=text),)
        return InboundNotification(
            sender_id=sender_id, channel_id=channel_id, timestamp=timestamp, blocks=tuple(blocks)
        )

    return _make


@pytest.fixture()
def linear_client() -> Mock:
    return Mock(spec=LinearClient)


@pytest.fixture()
def graphql_response():
    def _response(payload, status_code=200):
        response = Mock()
        response.status_code = status_code
        response.json.return_value = payload
        response.text = str(payload)
        return response

    return _response
