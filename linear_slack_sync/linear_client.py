"""Linear GraphQL client: issue lookup and Slack thread linking."""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from .config import Settings
from .models import NotFound, ThreadLinkResult, TrackerIssueRef, TransientFailure
from .utils import sanitize_for_logging

logger = logging.getLogger(__name__)

GET_ISSUE_QUERY = """
query GetIssue($issueId: String!) {
  issue(id: $issueId) {
    id
    identifier
    title
  }
}
"""

ATTACHMENT_LINK_SLACK_MUTATION = """
mutation AttachmentLinkSlack($issueId: String!, $url: String!) {
  attachmentLinkSlack(issueId: $issueId, url: $url, syncToCommentThread: true) {
    success
    attachment {
      id
    }
  }
}
"""

ENTITY_NOT_FOUND_PREFIX = "Entity not found"


class LinearClient:
    """Single-attempt calls against the Linear GraphQL API."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.api_url = str(settings.linear_api_url)
        self.timeout = settings.linear_timeout_seconds

    def get_issue(self, identifier: str) -> TrackerIssueRef | NotFound | TransientFailure:
        """Resolve a human-readable identifier (``PROJ-123``) to the issue record."""
        try:
            payload = self._post(GET_ISSUE_QUERY, {"issueId": identifier})
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching Linear issue %s: %s", identifier, exc)
            return TransientFailure("request failed", detail=str(exc))

        errors = payload.get("errors")
        if errors:
            if _all_not_found(errors):
                return NotFound(identifier)
            logger.error(
                "Linear API errors fetching issue %s: %s",
                identifier,
                sanitize_for_logging(errors),
            )
            return TransientFailure("graphql errors", detail=errors)

        data = payload.get("data")
        if not isinstance(data, dict) or "issue" not in data:
            logger.error(
                "Unexpected Linear API response fetching issue %s: %s",
                identifier,
                sanitize_for_logging(payload),
            )
            return TransientFailure("unexpected response", detail=payload)

        issue = data["issue"]
        if issue is None:
            return NotFound(identifier)
        if not isinstance(issue, dict) or not issue.get("id"):
            logger.error(
                "Malformed Linear issue record for %s: %s",
                identifier,
                sanitize_for_logging(issue),
            )
            return TransientFailure("malformed issue record", detail=issue)

        return TrackerIssueRef(
            id=issue["id"],
            identifier=issue.get("identifier") or identifier,
            title=issue.get("title") or "",
        )

    def link_slack_thread(self, issue_id: str, url: str) -> ThreadLinkResult | TransientFailure:
        """Attach the Slack thread to the issue and turn on comment-thread sync.

        Not idempotent: every successful call creates a new attachment.
        """
        try:
            payload = self._post(ATTACHMENT_LINK_SLACK_MUTATION, {"issueId": issue_id, "url": url})
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error syncing Linear issue %s with Slack: %s", issue_id, exc)
            return TransientFailure("request failed", detail=str(exc))

        errors = payload.get("errors")
        if errors:
            logger.error(
                "Linear API errors for issue %s: %s", issue_id, sanitize_for_logging(errors)
            )
            return TransientFailure("graphql errors", detail=errors)

        data = payload.get("data")
        result = data.get("attachmentLinkSlack") if isinstance(data, dict) else None
        success = result.get("success") if isinstance(result, dict) else None
        attachment = result.get("attachment") if isinstance(result, dict) else None
        attachment_id = attachment.get("id") if isinstance(attachment, dict) else None
        if not isinstance(success, bool) or (success and not attachment_id):
            logger.error(
                "Unexpected Linear API response for issue %s: %s",
                issue_id,
                sanitize_for_logging(payload),
            )
            return TransientFailure("unexpected response", detail=payload)

        return ThreadLinkResult(success=success, attachment_id=attachment_id)

    def _post(self, query: str, variables: Dict[str, Any]) -> dict:
        # Linear personal API keys go in the header as-is, without a Bearer prefix.
        headers = {
            "Authorization": self.settings.linear_api_key,
            "Content-Type": "application/json",
        }
        response = self.session.post(
            self.api_url,
            json={"query": query, "variables": variables},
            headers=headers,
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            # Linear answers some GraphQL errors (e.g. unknown issue) with a 4xx
            # status and a regular errors list; let the caller classify those.
            graphql_errors = _graphql_error_body(response)
            if graphql_errors is not None:
                return graphql_errors
            logger.error(
                "Linear request failed (%s): %s",
                response.status_code,
                sanitize_for_logging(response.text),
            )
            response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Linear response is not a JSON object: {type(payload).__name__}")
        return payload


def _graphql_error_body(response) -> dict | None:
    if response.status_code >= 500:
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and payload.get("errors"):
        return payload
    return None


def _all_not_found(errors: Any) -> bool:
    if not isinstance(errors, list):
        return False
    return all(
        isinstance(error, dict)
        and str(error.get("message", "")).startswith(ENTITY_NOT_FOUND_PREFIX)
        for error in errors
    )
