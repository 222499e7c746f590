"""Decodes GitHub webhook deliveries into internal events and routes them."""

import json
from typing import Any, Protocol, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ci_sync_bot.events.exceptions import EventDecodeError
from ci_sync_bot.events.models import (
    BranchPushEvent,
    CheckSuitePayload,
    CheckSuiteRerequestedEvent,
    Event,
    IssueCommentCreatedEvent,
    IssueCommentPayload,
    PullRequestEvent,
    PullRequestPayload,
    PushPayload,
    TagPushEvent,
)
from ci_sync_bot.utils.constants import BRANCH_REF_PREFIX, TAG_REF_PREFIX

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

PULL_REQUEST_ACTIONS = frozenset({"opened", "edited", "closed", "synchronize"})


class EventHandler(Protocol):
    """Anything that can handle a decoded event."""

    async def handle(self, event: Event) -> None: ...


def _validate(event_type: str, model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise EventDecodeError(event_type, str(exc)) from exc


def _decode_push(payload: Any) -> Event | None:
    push = _validate("push", PushPayload, payload)
    owner, repo = push.repository.owner.login, push.repository.name
    if push.ref.startswith(BRANCH_REF_PREFIX):
        return BranchPushEvent(owner=owner, repo=repo, branch=push.ref.removeprefix(BRANCH_REF_PREFIX))
    if push.ref.startswith(TAG_REF_PREFIX):
        return TagPushEvent(owner=owner, repo=repo, tag=push.ref.removeprefix(TAG_REF_PREFIX))
    return None


def _decode_check_suite(payload: Any) -> Event | None:
    check_suite = _validate("check_suite", CheckSuitePayload, payload)
    if check_suite.action != "rerequested":
        return None
    return CheckSuiteRerequestedEvent(
        owner=check_suite.repository.owner.login,
        repo=check_suite.repository.name,
        app_id=check_suite.check_suite.app.id if check_suite.check_suite.app is not None else None,
        pull_request_numbers=tuple(pull_request.number for pull_request in check_suite.check_suite.pull_requests),
    )


def _decode_issue_comment(payload: Any) -> Event | None:
    issue_comment = _validate("issue_comment", IssueCommentPayload, payload)
    if issue_comment.action != "created":
        return None
    return IssueCommentCreatedEvent(
        owner=issue_comment.repository.owner.login,
        repo=issue_comment.repository.name,
        issue_number=issue_comment.issue.number,
        issue_state=issue_comment.issue.state,
        is_pull_request=issue_comment.issue.pull_request is not None,
        body=issue_comment.comment.body,
    )


def _decode_pull_request(payload: Any) -> Event | None:
    pull_request = _validate("pull_request", PullRequestPayload, payload)
    if pull_request.action not in PULL_REQUEST_ACTIONS:
        return None
    return PullRequestEvent(action=pull_request.action, pull_request=pull_request.pull_request)


DECODERS = {
    "push": _decode_push,
    "check_suite": _decode_check_suite,
    "issue_comment": _decode_issue_comment,
    "pull_request": _decode_pull_request,
}


def decode(event_type: str, body: bytes | str) -> Event | None:
    """Decode a webhook delivery into an internal event.

    Args:
        event_type: Value of the X-GitHub-Event header
        body: Raw JSON payload

    Returns:
        The decoded event, or None for events, actions and refs the bot does not act on.

    Raises:
        EventDecodeError: If the payload is not JSON or does not match the event's schema.
    """
    decoder = DECODERS.get(event_type)
    if decoder is None:
        logger.debug("Ignoring unsupported event type", event_type=event_type)
        return None
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise EventDecodeError(event_type, str(exc)) from exc
    return decoder(payload)


class EventDispatcher:
    """Routes webhook deliveries to an event handler."""

    def __init__(self, handler: EventHandler) -> None:
        """Initialize the dispatcher with the handler decoded events are given to."""
        self.handler = handler

    async def dispatch(self, event_type: str, body: bytes | str) -> None:
        """Decode a webhook delivery and handle the resulting event, if any."""
        event = decode(event_type, body)
        if event is None:
            return
        logger.info("Handling event", event_type=event_type, event_kind=type(event).__name__)
        await self.handler.handle(event)
