"""Core functionality for the GitLab import tool."""

from gitlab_import.core.config import (
    GitLabConfig,
    ImportConfig,
    get_env_variable,
    load_config_from_env,
)
from gitlab_import.core.exceptions import (
    ConfigError,
    ImportErrorKind,
    ImportToolError,
    RepositoryImportError,
)
from gitlab_import.core.fetch import FetchExecutor
from gitlab_import.core.paths import ImportTarget, destination_path, resolve_destination
from gitlab_import.core.provisioner import ProjectProvisioner, impersonate
from gitlab_import.core.source import Credentials, SourceUriResolver, StaticCredentialProvider
from gitlab_import.core.step import ImportState, ImportStep, ImportStepFactory

__all__ = [
    "ImportToolError",
    "ConfigError",
    "ImportErrorKind",
    "RepositoryImportError",
    "GitLabConfig",
    "ImportConfig",
    "get_env_variable",
    "load_config_from_env",
    "ImportTarget",
    "destination_path",
    "resolve_destination",
    "Credentials",
    "SourceUriResolver",
    "StaticCredentialProvider",
    "ProjectProvisioner",
    "impersonate",
    "FetchExecutor",
    "ImportState",
    "ImportStep",
    "ImportStepFactory",
]
