"""Reacts to decoded webhook events."""

import structlog

from ci_sync_bot.checks.jira import JiraCheck
from ci_sync_bot.checks.models import CheckEvent
from ci_sync_bot.configuration.models import BranchReference, Configuration
from ci_sync_bot.events.models import (
    BranchPushEvent,
    CheckSuiteRerequestedEvent,
    Event,
    IssueCommentCreatedEvent,
    PullRequestEvent,
    TagPushEvent,
)
from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.github.models import PullRequestModel
from ci_sync_bot.synchronize.branches import BranchSynchronizer
from ci_sync_bot.synchronize.exceptions import BranchSyncAggregateError, BranchSyncError
from ci_sync_bot.synchronize.versions import VersionCache
from ci_sync_bot.utils.constants import RECHECK_COMMAND_PATTERN

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

PULL_REQUEST_CHECK_EVENTS = {
    "opened": CheckEvent.OPENED,
    "edited": CheckEvent.EDITED,
    "closed": CheckEvent.CLOSED,
    "synchronize": CheckEvent.SYNC,
}


class Reactor:
    """Turns events into branch synchronizations, cache invalidations and Jira checks."""

    def __init__(
        self,
        configuration: Configuration,
        github: GitHubClientBase,
        synchronizer: BranchSynchronizer,
        version_cache: VersionCache,
        jira_check: JiraCheck,
        app_id: int | None = None,
    ) -> None:
        """Initialize the reactor.

        Args:
            configuration: Repository configuration
            github: GitHub client
            synchronizer: Synchronizer used for branch pushes
            version_cache: Release tag cache invalidated on tag pushes
            jira_check: Check run on pull request events
            app_id: ID of the GitHub App the bot runs as; looked up from GitHub when not given
        """
        self.configuration = configuration
        self.github = github
        self.synchronizer = synchronizer
        self.version_cache = version_cache
        self.jira_check = jira_check
        self._app_id = app_id

    async def handle(self, event: Event) -> None:
        """Handle an event."""
        match event:
            case BranchPushEvent():
                await self.handle_branch_push(event)
            case TagPushEvent():
                self.handle_tag_push(event)
            case CheckSuiteRerequestedEvent():
                await self.handle_check_suite_rerequested(event)
            case IssueCommentCreatedEvent():
                await self.handle_issue_comment_created(event)
            case PullRequestEvent():
                await self.handle_pull_request(event)
            case _:
                raise TypeError(f"unsupported event type: {type(event).__name__}")

    async def handle_branch_push(self, event: BranchPushEvent) -> None:
        """Synchronize every branch that follows the pushed branch.

        Every destination is attempted; failures are raised together once all
        of them have been processed.
        """
        source = BranchReference(owner=event.owner, repo=event.repo, branch=event.branch)
        destinations = self.configuration.branches_synced_from(event.owner, event.repo, event.branch)
        logger.debug("Branch pushed", owner=event.owner, repo=event.repo, branch=event.branch, destination_count=len(destinations))
        errors: list[Exception] = []
        for destination in destinations:
            try:
                await self.synchronizer.sync(destination, source)
            except BranchSyncError as exc:
                logger.error("Failed to sync branch", destination=str(destination), source=str(source), error=str(exc))
                errors.append(exc)
        if errors:
            raise BranchSyncAggregateError(errors)

    def handle_tag_push(self, event: TagPushEvent) -> None:
        """Forget the cached release tags so that the next lookup sees the new tag."""
        logger.info("Tag pushed", owner=event.owner, repo=event.repo, tag=event.tag)
        self.version_cache.invalidate()

    async def _get_app_id(self) -> int:
        if self._app_id is None:
            app = await self.github.get_authenticated_app()
            self._app_id = app.id
        return self._app_id

    async def _recheck(self, owner: str, repo: str, pull_number: int) -> None:
        pull_request = await self.github.get_pull_request(owner, repo, pull_number)
        await self._run_check(CheckEvent.RECHECK, pull_request)

    async def _run_check(self, event: CheckEvent, pull_request: PullRequestModel) -> None:
        if pull_request.base.repo is None:
            logger.warning("Pull request has no base repository", number=pull_request.number)
            return
        owner = pull_request.base.repo.owner.login
        repo = pull_request.base.repo.name
        await self.jira_check.run(
            event,
            self.configuration.jira_for(owner, repo),
            self.configuration.branch_for(owner, repo, pull_request.base.ref),
            pull_request,
        )

    async def handle_check_suite_rerequested(self, event: CheckSuiteRerequestedEvent) -> None:
        """Re-run the check on the pull requests of one of our own check suites."""
        app_id = await self._get_app_id()
        if event.app_id != app_id:
            logger.debug("Ignoring check suite of another app", owner=event.owner, repo=event.repo, app_id=event.app_id)
            return
        for pull_number in event.pull_request_numbers:
            await self._recheck(event.owner, event.repo, pull_number)

    async def handle_issue_comment_created(self, event: IssueCommentCreatedEvent) -> None:
        """Re-run the check when /recheck is commented on an open pull request."""
        if event.issue_state != "open" or not event.is_pull_request:
            return
        if RECHECK_COMMAND_PATTERN.search(event.body) is None:
            return
        logger.info("Recheck requested", owner=event.owner, repo=event.repo, number=event.issue_number)
        await self._recheck(event.owner, event.repo, event.issue_number)

    async def handle_pull_request(self, event: PullRequestEvent) -> None:
        """Run the check on the pull request embedded in the event."""
        check_event = PULL_REQUEST_CHECK_EVENTS.get(event.action)
        if check_event is None:
            return
        await self._run_check(check_event, event.pull_request)
