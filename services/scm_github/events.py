"""Webhook event normalizer.

Maps GitHub ``push`` and ``pull_request`` webhook payloads onto a single
canonical event shape. Only those two event types are understood; anything
else is rejected. Pull request sub-actions outside the known set are treated
as a close.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from scm_github.errors import InvalidEventPayload, UnsupportedEvent

EVENT_HEADER = "x-github-event"

_BRANCH_REF_PREFIX = "refs/heads/"


class EventType(StrEnum):
    PUSH = "push"
    PULL_REQUEST = "pull_request"


class EventAction(StrEnum):
    """Canonical actions handed to the consumer."""

    PUSH = "repo:push"
    PR_OPENED = "pr:opened"
    PR_CLOSED = "pr:closed"
    PR_SYNCHRONIZE = "pr:synchronize"


@dataclass(frozen=True)
class CanonicalEvent:
    """Provider-independent view of a webhook."""

    action: EventAction
    type: EventType
    branch: str
    url: str
    sha: str
    username: str
    pr_number: int | None = None
    pr_ref: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Render with the consumer's key names, omitting unset PR fields."""
        data: dict[str, Any] = {
            "action": self.action.value,
            "branch": self.branch,
            "url": self.url,
            "sha": self.sha,
            "type": self.type.value,
            "username": self.username,
        }
        if self.pr_number is not None:
            data["prNumber"] = self.pr_number
        if self.pr_ref is not None:
            data["prRef"] = self.pr_ref
        return data


def get_event_type(headers: Mapping[str, Any]) -> str | None:
    """Read the event type header, ignoring header name case."""
    for name, value in headers.items():
        if name.lower() == EVENT_HEADER:
            return value
    return None


def pull_request_action(sub_action: str | None) -> EventAction:
    match sub_action:
        case "opened":
            return EventAction.PR_OPENED
        case "synchronize":
            return EventAction.PR_SYNCHRONIZE
        case "closed":
            return EventAction.PR_CLOSED
        case _:
            # labeled, assigned, edited, reopened, ...
            return EventAction.PR_CLOSED


def _reach(payload: Mapping[str, Any], path: str, event: str) -> Any:
    """Walk a dotted path through nested mappings."""
    value: Any = payload
    for key in path.split("."):
        if not isinstance(value, Mapping) or value.get(key) is None:
            raise InvalidEventPayload(event, path)
        value = value[key]
    return value


def _push_event(payload: Mapping[str, Any]) -> CanonicalEvent:
    event = EventType.PUSH.value
    ref = _reach(payload, "ref", event)
    sha = payload.get("after") or _reach(payload, "head_commit.id", event)

    return CanonicalEvent(
        action=EventAction.PUSH,
        type=EventType.PUSH,
        branch=ref.removeprefix(_BRANCH_REF_PREFIX),
        url=_reach(payload, "repository.ssh_url", event),
        sha=sha,
        username=_reach(payload, "sender.login", event),
    )


def _pull_request_event(payload: Mapping[str, Any]) -> CanonicalEvent:
    event = EventType.PULL_REQUEST.value
    url = _reach(payload, "repository.ssh_url", event)
    pr_number = _reach(payload, "pull_request.number", event)

    return CanonicalEvent(
        action=pull_request_action(payload.get("action")),
        type=EventType.PULL_REQUEST,
        branch=_reach(payload, "pull_request.base.ref", event),
        url=url,
        sha=_reach(payload, "pull_request.head.sha", event),
        # the PR author, not whoever triggered this delivery
        username=_reach(payload, "pull_request.user.login", event),
        pr_number=pr_number,
        pr_ref=f"{url}#pull/{pr_number}/merge",
    )


def normalize_event(payload: Mapping[str, Any], headers: Mapping[str, Any]) -> CanonicalEvent:
    """Turn a raw webhook payload into a CanonicalEvent.

    Raises:
        UnsupportedEvent: the event type header is not push or pull_request.
        InvalidEventPayload: a field the canonical event needs is missing.
    """
    event_type = get_event_type(headers)

    match event_type:
        case EventType.PUSH:
            return _push_event(payload)
        case EventType.PULL_REQUEST:
            return _pull_request_event(payload)
        case _:
            raise UnsupportedEvent(event_type)
