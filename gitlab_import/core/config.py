"""
Configuration module for the GitLab import project.

This module provides configuration classes and validation for the project.
It uses Pydantic for configuration validation and dotenv for loading
environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import gitlab
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

from gitlab_import.core.exceptions import ConfigError

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

DEFAULT_SOURCE_URL = "https://github.com"


class GitLabConfig(BaseModel):
    """Configuration for GitLab connection with validation."""

    url: str
    token: SecretStr

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        """Validates URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    def get_client(self) -> gitlab.Gitlab:
        """Creates and returns a GitLab client."""
        return gitlab.Gitlab(url=self.url, private_token=self.token.get_secret_value())


class ImportConfig(BaseModel):
    """Overall configuration for the import step."""

    target: GitLabConfig
    git_dir: Path
    import_account: Union[int, str]
    source_url: str = DEFAULT_SOURCE_URL
    source_username: Optional[str] = None
    source_token: Optional[SecretStr] = None
    token_ttl_days: int = Field(default=1, ge=1, le=365)

    @field_validator("git_dir")
    @classmethod
    def validate_git_dir(cls, v):
        """Repository root must be absolute so destinations do not depend on cwd."""
        if not v.is_absolute():
            raise ValueError(f"Git directory must be an absolute path: {v}")
        return v

    @field_validator("import_account")
    @classmethod
    def validate_import_account(cls, v):
        """Numeric strings are user ids, anything else a username."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Import account cannot be empty")
            if v.isdigit():
                return int(v)
        return v

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v):
        """Validates source URL."""
        if not v.startswith(("http://", "https://", "file://")):
            raise ValueError("Source URL must start with http://, https:// or file://")
        return v.rstrip("/")


def get_env_variable(name: str, required: bool = False) -> Optional[str]:
    """
    Retrieve environment variable.

    Args:
        name: Name of the environment variable
        required: Whether the variable is required

    Returns:
        Value of the environment variable or None if not required and not found

    Raises:
        ConfigError: If the variable is required but not found
    """
    value = os.getenv(name)

    if required and not value:
        logger.error("Missing required environment variable: %s", name)
        raise ConfigError(f"Missing required environment variable: {name}")

    return value


def load_config_from_env() -> ImportConfig:
    """
    Load configuration from environment variables.

    Returns:
        ImportConfig object with validated configuration

    Raises:
        ConfigError: If any required configuration is missing or invalid
    """
    try:
        target_url = get_env_variable("TARGET_GITLAB_URL", required=True)
        target_token = get_env_variable("TARGET_GITLAB_TOKEN", required=True)
        git_dir = get_env_variable("IMPORT_GIT_DIR", required=True)
        import_account = get_env_variable("IMPORT_ACCOUNT", required=True)
        source_url = get_env_variable("SOURCE_URL") or DEFAULT_SOURCE_URL
        source_username = get_env_variable("SOURCE_USERNAME")
        source_token = get_env_variable("SOURCE_TOKEN")
        ttl_str = get_env_variable("IMPERSONATION_TOKEN_TTL_DAYS")

        config = ImportConfig(
            target=GitLabConfig(url=target_url, token=SecretStr(target_token)),
            git_dir=Path(git_dir),
            import_account=import_account,
            source_url=source_url,
            source_username=source_username,
            source_token=SecretStr(source_token) if source_token else None,
            token_ttl_days=int(ttl_str) if ttl_str else 1,
        )

        return config
    except ConfigError:
        raise
    except ValueError as e:
        logger.error("Configuration validation error: %s", e)
        raise ConfigError(f"Configuration validation error: {e}") from e
