"""Pydantic models for the repository configuration file and authentication settings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


class ConfigurationModel(BaseModel):
    """Base model accepting both camelCase keys (as written in YAML) and field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BranchReference(BaseModel):
    """Identifies a branch in a specific repository."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    branch: str

    def __str__(self) -> str:
        """Render the reference as owner/repo:branch."""
        return f"{self.owner}/{self.repo}:{self.branch}"


class SyncSource(ConfigurationModel):
    """Source of a synchronized branch; owner and repo default to the enclosing repository."""

    owner: str = ""
    repo: str = ""
    branch: str = ""

    def resolve(self, owner: str, repo: str) -> BranchReference | None:
        """Return the fully-qualified source reference, or None when no source branch is set."""
        if not self.branch:
            return None
        return BranchReference(owner=self.owner or owner, repo=self.repo or repo, branch=self.branch)


class BranchConfig(ConfigurationModel):
    """Configuration of a single branch of a repository."""

    name: str
    sync_from: SyncSource = Field(default_factory=SyncSource)
    version: str = ""
    """Release stream (major.minor) developed on this branch, e.g. 3.8."""


class JiraCondition(ConfigurationModel):
    """Conjunction of optional predicates; an absent predicate always holds."""

    status: list[str] = Field(default_factory=list)
    merged: bool | None = None
    has_fix_version: bool | None = None
    event: list[str] = Field(default_factory=list)


class JiraRule(ConfigurationModel):
    """A conditional set of actions applied to a Jira issue."""

    when: JiraCondition = Field(default_factory=JiraCondition)
    transition_to: str = ""
    set_fix_version: bool = False
    comment: str = ""


class JiraConfig(ConfigurationModel):
    """Jira settings of a repository."""

    key: str = ""
    fix_version_prefix: str = ""
    rules: list[JiraRule] = Field(default_factory=list)


class RepositoryConfig(ConfigurationModel):
    """Configuration of a repository handled by the bot."""

    owner: str
    repo: str
    jira: JiraConfig = Field(default_factory=JiraConfig)
    branches: list[BranchConfig] = Field(default_factory=list)


class Configuration(ConfigurationModel):
    """Top-level repository configuration, read-only once loaded."""

    repositories: list[RepositoryConfig] = Field(default_factory=list)

    def repository(self, owner: str, repo: str) -> RepositoryConfig | None:
        """Get the configuration of a repository."""
        for repository in self.repositories:
            if repository.owner == owner and repository.repo == repo:
                return repository
        return None

    def jira_for(self, owner: str, repo: str) -> JiraConfig:
        """Get the Jira settings of a repository (empty settings if it is not configured)."""
        repository = self.repository(owner, repo)
        if repository is None:
            return JiraConfig()
        return repository.jira

    def branch_for(self, owner: str, repo: str, branch: str) -> BranchConfig:
        """Get the configuration of a branch (a bare configuration if it is not configured)."""
        repository = self.repository(owner, repo)
        if repository is not None:
            for branch_config in repository.branches:
                if branch_config.name == branch:
                    return branch_config
        return BranchConfig(name=branch)

    def sync_pairs(self) -> list[tuple[BranchReference, BranchReference]]:
        """List every (destination, source) pair of synchronized branches."""
        pairs: list[tuple[BranchReference, BranchReference]] = []
        for repository in self.repositories:
            for branch in repository.branches:
                source = branch.sync_from.resolve(repository.owner, repository.repo)
                if source is None:
                    continue
                destination = BranchReference(owner=repository.owner, repo=repository.repo, branch=branch.name)
                pairs.append((destination, source))
        return pairs

    def branches_synced_from(self, owner: str, repo: str, branch: str) -> list[BranchReference]:
        """List the destination branches that are synchronized from the given branch."""
        source = BranchReference(owner=owner, repo=repo, branch=branch)
        return [destination for destination, sync_source in self.sync_pairs() if sync_source == source]
