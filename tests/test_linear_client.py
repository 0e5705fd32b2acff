from unittest.mock import Mock

import pytest
import requests

from linear_slack_sync.linear_client import (
    ATTACHMENT_LINK_SLACK_MUTATION,
    GET_ISSUE_QUERY,
    LinearClient,
)
from linear_slack_sync.models import NotFound, ThreadLinkResult, TrackerIssueRef, TransientFailure

THREAD_URL = "https://acme.slack.com/archives/C123/p1700000000000100"


@pytest.fixture()
def session():
    return Mock(spec=requests.Session)


@pytest.fixture()
def client(settings, session):
    return LinearClient(settings, session=session)


def test_get_issue_returns_ref(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {"data": {"issue": {"id": "abc", "identifier": "PROJ-42", "title": "Fix bug"}}}
    )

    result = client.get_issue("PROJ-42")

    assert result == TrackerIssueRef(id="abc", identifier="PROJ-42", title="Fix bug")
    args, kwargs = session.post.call_args
    assert args[0] == "https://api.linear.app/graphql"
    assert kwargs["json"] == {"query": GET_ISSUE_QUERY, "variables": {"issueId": "PROJ-42"}}
    assert kwargs["headers"]["Authorization"] == "lin_api_test"
    assert kwargs["timeout"] == 30.0


def test_get_issue_null_record_is_not_found(client, session, graphql_response):
    session.post.return_value = graphql_response({"data": {"issue": None}})
    assert client.get_issue("PROJ-404") == NotFound("PROJ-404")


def test_get_issue_entity_not_found_error_is_not_found(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {"errors": [{"message": "Entity not found: Issue"}], "data": None}, status_code=400
    )
    assert client.get_issue("PROJ-404") == NotFound("PROJ-404")


def test_get_issue_other_errors_are_transient(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {"errors": [{"message": "Authentication required"}]}
    )
    result = client.get_issue("PROJ-42")
    assert isinstance(result, TransientFailure)
    assert result.reason == "graphql errors"


def test_get_issue_network_error_is_transient(client, session):
    session.post.side_effect = requests.ConnectionError("boom")
    result = client.get_issue("PROJ-42")
    assert isinstance(result, TransientFailure)
    assert "boom" in result.detail


def test_get_issue_server_error_is_transient(client, session, graphql_response):
    response = graphql_response({"errors": [{"message": "Entity not found"}]}, status_code=502)
    response.raise_for_status.side_effect = requests.HTTPError("502 Server Error")
    session.post.return_value = response

    assert isinstance(client.get_issue("PROJ-42"), TransientFailure)
    response.raise_for_status.assert_called_once()


def test_get_issue_invalid_json_is_transient(client, session, graphql_response):
    response = graphql_response(None)
    response.json.side_effect = ValueError("not json")
    session.post.return_value = response
    assert isinstance(client.get_issue("PROJ-42"), TransientFailure)


@pytest.mark.parametrize(
    "payload",
    [{}, {"data": None}, {"data": {}}, {"data": {"issue": {"title": "no id"}}}, {"data": {"issue": []}}],
)
def test_get_issue_unexpected_shape_is_transient(client, session, graphql_response, payload):
    session.post.return_value = graphql_response(payload)
    assert isinstance(client.get_issue("PROJ-42"), TransientFailure)


def test_link_slack_thread_success(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {"data": {"attachmentLinkSlack": {"success": True, "attachment": {"id": "att1"}}}}
    )

    result = client.link_slack_thread("abc", THREAD_URL)

    assert result == ThreadLinkResult(success=True, attachment_id="att1")
    kwargs = session.post.call_args.kwargs
    assert kwargs["json"]["query"] == ATTACHMENT_LINK_SLACK_MUTATION
    assert kwargs["json"]["variables"] == {"issueId": "abc", "url": THREAD_URL}
    assert "syncToCommentThread: true" in kwargs["json"]["query"]


def test_link_slack_thread_reports_unsuccessful(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {"data": {"attachmentLinkSlack": {"success": False, "attachment": None}}}
    )
    assert client.link_slack_thread("abc", THREAD_URL) == ThreadLinkResult(success=False)


def test_link_slack_thread_errors_win_over_data(client, session, graphql_response):
    session.post.return_value = graphql_response(
        {
            "errors": [{"message": "Slack integration not installed"}],
            "data": {"attachmentLinkSlack": {"success": True, "attachment": {"id": "att1"}}},
        }
    )
    result = client.link_slack_thread("abc", THREAD_URL)
    assert isinstance(result, TransientFailure)
    assert result.detail == [{"message": "Slack integration not installed"}]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data": None},
        {"data": []},
        {"data": {"attachmentLinkSlack": None}},
        {"data": {"attachmentLinkSlack": {}}},
        {"data": {"attachmentLinkSlack": {"success": "yes", "attachment": {"id": "att1"}}}},
        {"data": {"attachmentLinkSlack": {"success": True}}},
        {"data": {"attachmentLinkSlack": {"success": True, "attachment": None}}},
    ],
)
def test_link_slack_thread_unexpected_shape_is_transient(client, session, graphql_response, payload):
    session.post.return_value = graphql_response(payload)
    assert isinstance(client.link_slack_thread("abc", THREAD_URL), TransientFailure)


def test_link_slack_thread_timeout_is_transient(client, session):
    session.post.side_effect = requests.Timeout("read timed out")
    assert isinstance(client.link_slack_thread("abc", THREAD_URL), TransientFailure)
    assert session.post.call_count == 1
