"""Custom exceptions for branch synchronization."""

from ci_sync_bot.configuration.models import BranchReference


class BranchSyncError(Exception):
    """Raised when a destination branch could not be synchronized with its source."""

    def __init__(self, destination: BranchReference, message: str) -> None:
        """Initialize the exception with the destination branch and what went wrong."""
        super().__init__(message)
        self.destination = destination


class BranchSyncAggregateError(Exception):
    """Raised when one or more destination branches failed to synchronize."""

    def __init__(self, errors: list[Exception]) -> None:
        """Initialize the exception with every individual failure."""
        if len(errors) == 1:
            message = str(errors[0])
        else:
            message = "[" + ", ".join(str(error) for error in errors) + "]"
        super().__init__(message)
        self.errors = errors
