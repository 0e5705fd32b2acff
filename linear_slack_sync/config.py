"""Configuration management for the Linear→Slack thread sync bot."""

from __future__ import annotations

import re
from typing import Sequence

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()


def _split_list(value: str | Sequence[str] | None, coerce_lower: bool = True) -> list[str]:
    """Turn delimiter-separated env strings into cleaned lists."""
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[;,]", value)
    else:
        items = list(value)
    cleaned: list[str] = []
    for item in items:
        trimmed = item.strip()
        if not trimmed:
            continue
        cleaned.append(trimmed.lower() if coerce_lower else trimmed)
    return cleaned


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    slack_bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    slack_app_token: str = Field(..., alias="SLACK_APP_TOKEN")
    slack_signing_secret: str | None = Field(None, alias="SLACK_SIGNING_SECRET")
    slack_workspace_name: str = Field(..., alias="SLACK_WORKSPACE_NAME")
    slack_domain: str = Field("slack.com", alias="SLACK_DOMAIN")

    linear_api_key: str = Field(..., alias="LINEAR_API_KEY")
    linear_api_url: HttpUrl = Field("https://api.linear.app/graphql", alias="LINEAR_API_URL")
    linear_timeout_seconds: float = Field(30.0, gt=0, alias="LINEAR_TIMEOUT_SECONDS")

    # Slack bot ids whose messages are unsynced Linear notifications.
    unsynced_emitter_ids_raw: str = Field(
        "",
        validation_alias=AliasChoices("UNSYNCED_EMITTER_IDS", "UNSYNCED_LINEAR_BOT_IDS"),
    )

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    shutdown_grace_seconds: float = Field(10.0, ge=0, alias="SHUTDOWN_GRACE_SECONDS")

    dedupe_window_seconds: float = Field(0.0, ge=0, alias="DEDUPE_WINDOW_SECONDS")
    dedupe_max_entries: int = Field(1000, gt=0, alias="DEDUPE_MAX_ENTRIES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("slack_signing_secret", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("slack_workspace_name", "slack_domain", mode="before")
    @classmethod
    def _strip_dots(cls, value):
        if isinstance(value, str):
            return value.strip().strip(".")
        return value

    @property
    def unsynced_emitter_ids(self) -> frozenset[str]:
        """Slack bot ids are case-sensitive, so entries are kept verbatim."""
        return frozenset(_split_list(self.unsynced_emitter_ids_raw, coerce_lower=False))

    @property
    def dedupe_enabled(self) -> bool:
        return self.dedupe_window_seconds > 0
