"""Custom exceptions for GitHub operations."""


class NonFastForwardError(Exception):
    """Raised when a branch cannot be updated without rewriting its history."""

    def __init__(self, owner: str, repo: str, ref: str, message: str) -> None:
        """Initialize the exception with the rejected reference and GitHub's message."""
        super().__init__(f"update of {owner}/{repo} {ref} is not a fast forward: {message}")
        self.owner = owner
        self.repo = repo
        self.ref = ref
