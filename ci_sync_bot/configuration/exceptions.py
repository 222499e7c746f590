"""Contains exceptions raised when reconciling application configuration."""


class GitHubAuthenticationConfigurationUndefinedError(Exception):
    """Raised when the GitHub authentication configuration is undefined."""

    pass


class ConfigurationFileError(Exception):
    """Raised when the repository configuration file cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        """Initializes the exception with the offending path and the reason."""
        super().__init__(f"Failed to load configuration file {path}: {reason}")
        self.path = path
        self.reason = reason
