"""Tests for webhook event normalization."""

import pytest

from scm_github.errors import InvalidEventPayload, UnsupportedEvent
from scm_github.events import (
    CanonicalEvent,
    EventAction,
    EventType,
    get_event_type,
    normalize_event,
    pull_request_action,
)

COMMON_PULL_REQUEST = {
    "branch": "master",
    "url": "git@github.com:baxterthehacker/public-repo.git",
    "prNumber": 1,
    "prRef": "git@github.com:baxterthehacker/public-repo.git#pull/1/merge",
    "sha": "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c",
    "type": "pull_request",
    "username": "baxterthehacker",
}


class TestPushEvent:
    def test_push_payload(self, payload):
        event = normalize_event(payload("github.push"), {"x-github-event": "push"})

        assert event.as_dict() == {
            "action": "repo:push",
            "branch": "master",
            "url": "git@github.com:baxterthehacker/public-repo.git",
            "sha": "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c",
            "type": "push",
            "username": "baxterthehacker",
        }

    def test_header_name_is_case_insensitive(self, payload):
        event = normalize_event(payload("github.push"), {"X-GitHub-Event": "push"})
        assert event.action == EventAction.PUSH

    def test_falls_back_to_head_commit(self, payload):
        body = payload("github.push")
        del body["after"]
        body["head_commit"]["id"] = "abc123"

        event = normalize_event(body, {"x-github-event": "push"})
        assert event.sha == "abc123"

    def test_missing_repository(self, payload):
        body = payload("github.push")
        del body["repository"]

        with pytest.raises(InvalidEventPayload, match="repository.ssh_url"):
            normalize_event(body, {"x-github-event": "push"})


class TestPullRequestEvent:
    @pytest.mark.parametrize(
        ("fixture", "action"),
        [
            ("github.pull_request.opened", "pr:opened"),
            ("github.pull_request.closed", "pr:closed"),
            ("github.pull_request.synchronize", "pr:synchronize"),
            ("github.pull_request.labeled", "pr:closed"),
        ],
    )
    def test_pull_request_payloads(self, payload, fixture, action):
        event = normalize_event(payload(fixture), {"x-github-event": "pull_request"})

        assert event.as_dict() == {**COMMON_PULL_REQUEST, "action": action}

    def test_username_is_pull_request_author(self, payload):
        body = payload("github.pull_request.labeled")
        body["sender"]["login"] = "someone-else"

        event = normalize_event(body, {"x-github-event": "pull_request"})

        assert event.username == "baxterthehacker"

    def test_missing_pull_request(self, payload):
        body = payload("github.pull_request.opened")
        del body["pull_request"]["base"]

        with pytest.raises(InvalidEventPayload, match="pull_request.base.ref"):
            normalize_event(body, {"x-github-event": "pull_request"})


class TestUnsupportedEvent:
    def test_other_event(self, payload):
        with pytest.raises(UnsupportedEvent, match=r"Event other_event not supported"):
            normalize_event(payload("github.push"), {"x-github-event": "other_event"})

    def test_missing_header(self, payload):
        with pytest.raises(UnsupportedEvent) as exc_info:
            normalize_event(payload("github.push"), {})

        assert exc_info.value.event is None


class TestHelpers:
    @pytest.mark.parametrize(
        ("sub_action", "expected"),
        [
            ("opened", EventAction.PR_OPENED),
            ("closed", EventAction.PR_CLOSED),
            ("synchronize", EventAction.PR_SYNCHRONIZE),
            ("reopened", EventAction.PR_CLOSED),
            (None, EventAction.PR_CLOSED),
        ],
    )
    def test_pull_request_action(self, sub_action, expected):
        assert pull_request_action(sub_action) is expected

    def test_get_event_type(self):
        assert get_event_type({"Content-Type": "application/json", "X-GITHUB-EVENT": "ping"}) == "ping"
        assert get_event_type({"Content-Type": "application/json"}) is None

    def test_push_event_has_no_pr_fields(self):
        event = CanonicalEvent(
            action=EventAction.PUSH,
            type=EventType.PUSH,
            branch="main",
            url="git@github.com:foo/bar.git",
            sha="abc",
            username="foo",
        )

        assert "prNumber" not in event.as_dict()
        assert "prRef" not in event.as_dict()
