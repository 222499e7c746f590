"""Checks pull request titles against Jira and applies Jira rules.

A pull request title is expected to end with the key of the Jira issue it
addresses, e.g. "Fix the build (PROJQUAY-123)". The outcome is reported as
a check run on the head commit. When the issue exists, the rules of the
repository are evaluated in order and the first matching rule is applied
to the issue.
"""

from datetime import datetime

import structlog

from ci_sync_bot.checks.models import CheckConclusion, CheckEvent
from ci_sync_bot.configuration.models import BranchConfig, JiraCondition, JiraConfig, JiraRule
from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.github.models import CheckRunOutput, PullRequestModel
from ci_sync_bot.jira.abc import JiraClientBase
from ci_sync_bot.jira.exceptions import JiraRequestFailedError, JiraUnreachableError
from ci_sync_bot.jira.models import JiraIssue
from ci_sync_bot.synchronize.versions import VersionCache
from ci_sync_bot.utils.constants import CHECK_RUN_NAME, INTERNAL_ERROR_MARKER, TITLE_JIRA_KEY_PATTERN
from ci_sync_bot.utils.templates import render_template_string

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

RECHECK_HINT = "You can retry the check by commenting `/recheck` on the pull request."


def extract_jira_key(title: str) -> str:
    """Extract the trailing Jira issue key of a pull request title, or an empty string."""
    match = TITLE_JIRA_KEY_PATTERN.search(title)
    if match is None:
        return ""
    return match.group(1)


def match_condition(event: CheckEvent, issue: JiraIssue, pull_request: PullRequestModel, fix_version: str, condition: JiraCondition) -> bool:
    """Whether every predicate present in a condition holds."""
    if condition.status and issue.status not in condition.status:
        return False
    if condition.merged is not None and pull_request.merged != condition.merged:
        return False
    if condition.has_fix_version is not None:
        if not fix_version:
            return False
        if issue.has_fix_version(fix_version) != condition.has_fix_version:
            return False
    if condition.event and event.value not in condition.event:
        return False
    return True


def find_matching_rule(
    event: CheckEvent, issue: JiraIssue, pull_request: PullRequestModel, fix_version: str, rules: list[JiraRule]
) -> JiraRule | None:
    """Get the first rule whose condition matches."""
    for rule in rules:
        if match_condition(event, issue, pull_request, fix_version, rule.when):
            return rule
    return None


class JiraCheck:
    """Validates pull request titles and drives Jira issues from pull request events."""

    def __init__(self, github: GitHubClientBase, jira: JiraClientBase, version_cache: VersionCache) -> None:
        """Initialize the check."""
        self.github = github
        self.jira = jira
        self.version_cache = version_cache
        self._bot_login: str | None = None

    async def _get_bot_login(self) -> str:
        if self._bot_login is None:
            self._bot_login = await self.github.get_bot_login()
        return self._bot_login

    async def _delete_old_comments(self, owner: str, repo: str, number: int, created_before: datetime, marker: str) -> None:
        """Delete the bot's comments that carry a marker and predate a point in time."""
        bot_login = await self._get_bot_login()
        comments = await self.github.list_issue_comments(owner, repo, number)
        for comment in comments:
            if comment.user is None or comment.user.login != bot_login:
                continue
            if comment.created_at >= created_before or marker not in comment.body:
                continue
            try:
                await self.github.delete_issue_comment(owner, repo, comment.id)
            except Exception as exc:
                logger.warning("Failed to delete comment", owner=owner, repo=repo, number=number, comment_id=comment.id, error=str(exc))

    async def _cleanup_internal_error_comments(self, owner: str, repo: str, number: int, created_before: datetime | None) -> None:
        if created_before is None:
            return
        try:
            await self._delete_old_comments(owner, repo, number, created_before, INTERNAL_ERROR_MARKER)
        except Exception as exc:
            logger.warning("Failed to delete old comments", owner=owner, repo=repo, number=number, error=str(exc))

    async def _report_title_result(
        self, pull_request: PullRequestModel, owner: str, repo: str, conclusion: CheckConclusion, output: CheckRunOutput
    ) -> None:
        logger.debug(
            "Reporting pull request title result",
            owner=owner,
            repo=repo,
            number=pull_request.number,
            conclusion=conclusion.value,
            title=output.title,
        )
        check_run = await self.github.create_check_run(
            owner,
            repo,
            name=CHECK_RUN_NAME,
            head_sha=pull_request.head.sha,
            status="completed",
            conclusion=conclusion.value,
            output=output,
        )
        await self._cleanup_internal_error_comments(owner, repo, pull_request.number, check_run.completed_at)

    async def _report_internal_error(self, pull_request: PullRequestModel, owner: str, repo: str, message: str) -> None:
        logger.debug("Reporting internal error", owner=owner, repo=repo, number=pull_request.number, message=message)
        try:
            await self.github.create_check_run(owner, repo, name=CHECK_RUN_NAME, head_sha=pull_request.head.sha, status="queued")
        except Exception as exc:
            logger.warning("Failed to queue check run", owner=owner, repo=repo, number=pull_request.number, error=str(exc))

        comment = await self.github.create_issue_comment(owner, repo, pull_request.number, f"{message}\n{INTERNAL_ERROR_MARKER}\n")
        if comment.user is not None:
            self._bot_login = comment.user.login
        await self._cleanup_internal_error_comments(owner, repo, pull_request.number, comment.created_at)

    async def _transition_to(self, issue: JiraIssue, desired_status: str) -> None:
        logger.debug("Transitioning Jira issue", key=issue.key, from_status=issue.status, to_status=desired_status)
        transitions = await self.jira.list_transitions(issue.key)
        for transition in transitions:
            if transition.to_status == desired_status:
                await self.jira.do_transition(issue.key, transition.id)
                return
        logger.debug("No transition leads to the desired status", key=issue.key, to_status=desired_status)

    async def _apply_rule(self, issue: JiraIssue, pull_request: PullRequestModel, fix_version: str, rule: JiraRule) -> None:
        if rule.set_fix_version and fix_version and not issue.has_fix_version(fix_version):
            await self.jira.add_fix_version(issue.key, fix_version)

        if rule.comment:
            body = render_template_string(rule.comment, {"pull_request": pull_request.model_dump(mode="json")})
            await self.jira.add_comment(issue.key, body)

        if rule.transition_to:
            await self._transition_to(issue, rule.transition_to)

    async def run(self, event: CheckEvent, jira_config: JiraConfig, branch_config: BranchConfig, pull_request: PullRequestModel) -> None:
        """Check a pull request and apply the first matching Jira rule.

        Args:
            event: What triggered the check
            jira_config: Jira settings of the pull request's repository
            branch_config: Configuration of the pull request's base branch
            pull_request: The pull request to check
        """
        if not jira_config.key:
            return

        if pull_request.base.repo is None:
            raise ValueError(f"pull request #{pull_request.number} has no base repository")
        owner = pull_request.base.repo.owner.login
        repo = pull_request.base.repo.name
        log = logger.bind(owner=owner, repo=repo, number=pull_request.number, check_event=event.value)
        log.debug("Checking pull request")

        key = extract_jira_key(pull_request.title)
        if not key.startswith(f"{jira_config.key}-"):
            if key:
                summary = f"This check is skipped because the Jira issue `{key}` is not from the {jira_config.key} project.\n"
            else:
                summary = "This check is skipped because the pull request title does not have a Jira issue in the title.\n"
            summary += (
                f"\nThe title should be in the format `Title ({jira_config.key}-123)` "
                f"and the Jira issue should be from the {jira_config.key} project.\n"
            )
            await self._report_title_result(
                pull_request,
                owner,
                repo,
                CheckConclusion.SUCCESS,
                CheckRunOutput(title="Pull request does not have a Jira issue in the title", summary=summary),
            )
            return

        try:
            issue = await self.jira.get_issue(key)
        except JiraUnreachableError as exc:
            log.info("Failed to get Jira issue", key=key, error=str(exc))
            await self._report_internal_error(pull_request, owner, repo, f"The Jira server is not reachable. {RECHECK_HINT}")
            return
        except JiraRequestFailedError as exc:
            log.info("Failed to get Jira issue", key=key, error=str(exc), status_code=exc.status_code)
            if exc.status_code != 404:
                await self._report_internal_error(
                    pull_request, owner, repo, f"The Jira request failed with status code {exc.status_code}. {RECHECK_HINT}"
                )
                return
            await self._report_title_result(
                pull_request,
                owner,
                repo,
                CheckConclusion.FAILURE,
                CheckRunOutput(title=f"Jira issue {key} does not exist", summary=f"The Jira issue `{key}` does not exist.\n"),
            )
            return

        await self._report_title_result(
            pull_request,
            owner,
            repo,
            CheckConclusion.SUCCESS,
            CheckRunOutput(title="Pull request title has a valid Jira issue", summary="The pull request title is valid and has a Jira issue.\n"),
        )

        fix_version = ""
        if branch_config.version:
            next_version = await self.version_cache.next_version(owner, repo, branch_config.version)
            fix_version = jira_config.fix_version_prefix + next_version

        rule = find_matching_rule(event, issue, pull_request, fix_version, jira_config.rules)
        if rule is None:
            log.debug("No Jira rule matches", key=key, status=issue.status)
            return
        try:
            await self._apply_rule(issue, pull_request, fix_version, rule)
        except Exception as exc:
            log.warning("Failed to apply Jira rule", key=key, transition_to=rule.transition_to, error=str(exc))
