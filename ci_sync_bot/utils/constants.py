"""Shared constants used across the application."""

import re

# Version Constants
# -----------------

REF_VERSION_PATTERN = re.compile(r"^refs/tags/v(\d+\.\d+)\.(\d+)$")
"""Pattern to match release tags (e.g., refs/tags/v3.8.1) into stream and patch number."""

RELEASE_TAG_REF_PREFIX = "tags/v"
"""Prefix passed to the matching-refs API when listing release tags."""

# Event Constants
# ---------------

RECHECK_COMMAND_PATTERN = re.compile(r"^\s*/recheck\s*$", re.IGNORECASE | re.MULTILINE)
"""Pattern to match a line of a comment that consists of the /recheck command."""

BRANCH_REF_PREFIX = "refs/heads/"
TAG_REF_PREFIX = "refs/tags/"

# Jira Check Constants
# --------------------

TITLE_JIRA_KEY_PATTERN = re.compile(r" \(([A-Z]+-[0-9]+)\)\Z")
"""Pattern to match a trailing Jira issue key in a pull request title (e.g., 'Fix bug (PROJQUAY-123)')."""

CHECK_RUN_NAME = "Pull Request Title"
"""Name of the check run reported on pull requests."""

INTERNAL_ERROR_MARKER = "<!-- ci-sync-bot: jira internal error -->"
"""Hidden marker added to internal error comments so that stale ones can be cleaned up."""

# Reconciliation Constants
# ------------------------

DEFAULT_RESYNC_INTERVAL = 300.0
"""Default number of seconds between two periodic reconciliation passes."""
