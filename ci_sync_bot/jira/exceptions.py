"""Custom exceptions for Jira operations."""


class JiraError(Exception):
    """Base class for failed Jira requests."""

    pass


class JiraUnreachableError(JiraError):
    """Raised when Jira did not respond at all."""

    pass


class JiraRequestFailedError(JiraError):
    """Raised when Jira responded with a non-2xx status code."""

    def __init__(self, status_code: int, message: str) -> None:
        """Initialize the exception with the status code of the response."""
        super().__init__(f"Jira request failed with status code {status_code}: {message}")
        self.status_code = status_code
