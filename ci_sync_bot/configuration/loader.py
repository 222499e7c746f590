"""Loads the repository configuration file."""

from pathlib import Path

import structlog
from pydantic import ValidationError
from ruamel.yaml import YAMLError

from ci_sync_bot.configuration.exceptions import ConfigurationFileError
from ci_sync_bot.configuration.models import Configuration
from ci_sync_bot.utils.yaml import load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def load_configuration_from_file(path: Path) -> Configuration:
    """Load and validate the repository configuration from a YAML file."""
    if not path.exists():
        raise ConfigurationFileError(str(path), "file not found")
    try:
        content = load_yaml_file(path)
    except YAMLError as exc:
        raise ConfigurationFileError(str(path), str(exc)) from exc
    try:
        configuration = Configuration.model_validate(content or {})
    except ValidationError as exc:
        raise ConfigurationFileError(str(path), str(exc)) from exc
    logger.info(
        "Loaded configuration",
        path=str(path),
        repository_count=len(configuration.repositories),
        sync_pair_count=len(configuration.sync_pairs()),
    )
    return configuration
