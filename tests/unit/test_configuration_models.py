"""Unit tests for the repository configuration models and loader."""

from pathlib import Path

import pytest

from ci_sync_bot.configuration.exceptions import ConfigurationFileError
from ci_sync_bot.configuration.loader import load_configuration_from_file
from ci_sync_bot.configuration.models import BranchReference, Configuration

CONFIGURATION_YAML = """\
repositories:
  - owner: org
    repo: app
    jira:
      key: PROJQUAY
      fixVersionPrefix: quay-v
      rules:
        - when:
            event: [closed]
            merged: true
            hasFixVersion: false
          setFixVersion: true
          transitionTo: Closed
          comment: "Merged in {{ pull_request.html_url }}"
    branches:
      - name: master
      - name: redhat-3.8
        version: "3.8"
        syncFrom:
          branch: master
  - owner: fork
    repo: app
    branches:
      - name: master
        syncFrom:
          owner: org
          repo: app
          branch: master
"""


@pytest.fixture
def configuration(tmp_path: Path) -> Configuration:
    """Load the sample configuration from disk."""
    path = tmp_path / "config.yaml"
    path.write_text(CONFIGURATION_YAML, encoding="utf-8")
    return load_configuration_from_file(path)


def test_camel_case_keys_are_loaded(configuration: Configuration) -> None:
    """Keys are written in camelCase in the file."""
    jira = configuration.jira_for("org", "app")
    assert jira.key == "PROJQUAY"
    assert jira.fix_version_prefix == "quay-v"
    rule = jira.rules[0]
    assert rule.when.event == ["closed"]
    assert rule.when.merged is True
    assert rule.when.has_fix_version is False
    assert rule.when.status == []
    assert rule.set_fix_version is True
    assert rule.transition_to == "Closed"


def test_sync_sources_default_to_enclosing_repository(configuration: Configuration) -> None:
    """A source without owner and repo lives in the same repository."""
    assert configuration.sync_pairs() == [
        (BranchReference(owner="org", repo="app", branch="redhat-3.8"), BranchReference(owner="org", repo="app", branch="master")),
        (BranchReference(owner="fork", repo="app", branch="master"), BranchReference(owner="org", repo="app", branch="master")),
    ]


def test_branches_synced_from(configuration: Configuration) -> None:
    """The inverse of the sync mapping spans repositories."""
    assert [str(branch) for branch in configuration.branches_synced_from("org", "app", "master")] == [
        "org/app:redhat-3.8",
        "fork/app:master",
    ]
    assert configuration.branches_synced_from("org", "app", "redhat-3.8") == []


def test_unknown_repository_and_branch_have_empty_settings(configuration: Configuration) -> None:
    """Lookups of unconfigured repositories and branches return bare settings."""
    assert configuration.jira_for("other", "repo").key == ""
    assert configuration.jira_for("fork", "app").rules == []
    branch = configuration.branch_for("org", "app", "feature")
    assert branch.name == "feature"
    assert branch.version == ""
    assert branch.sync_from.resolve("org", "app") is None
    assert configuration.branch_for("org", "app", "redhat-3.8").version == "3.8"


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    """A missing configuration file is reported with its path."""
    path = tmp_path / "missing.yaml"

    with pytest.raises(ConfigurationFileError, match="file not found") as exc_info:
        load_configuration_from_file(path)

    assert exc_info.value.path == str(path)


@pytest.mark.parametrize(
    "content",
    [
        "repositories: [",
        "repositories:\n  - owner: org\n",
        "repositories:\n  - owner: org\n    repo: app\n    branches:\n      - version: '3.8'\n",
    ],
)
def test_invalid_file_is_rejected(tmp_path: Path, content: str) -> None:
    """Malformed YAML and schema mismatches are configuration errors."""
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationFileError):
        load_configuration_from_file(path)


def test_empty_file_is_an_empty_configuration(tmp_path: Path) -> None:
    """An empty file configures no repository."""
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_configuration_from_file(path).repositories == []
