"""
Custom exceptions for the GitLab import project.

Import failures are reported through a single exception type carrying an
explicit kind, so callers can branch on ``error.kind`` instead of on classes.
"""

import enum
from pathlib import Path
from typing import Optional


class ImportToolError(Exception):
    """Base exception for import operations."""


class ConfigError(ImportToolError):
    """Configuration related errors."""


class ImportErrorKind(enum.Enum):
    """Discriminant of a failed import step."""

    ALREADY_EXISTS = "already_exists"
    PROVISIONING_FAILED = "provisioning_failed"
    CLONE_FAILED = "clone_failed"


class RepositoryImportError(ImportToolError):
    """
    Failure of a single repository import.

    Attributes:
        kind: What went wrong, see ImportErrorKind
        project_name: ``organisation/repository`` of the import target
        source_uri: Source repository URI (clone failures only)
        destination: Local destination directory (clone failures only)
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        kind: ImportErrorKind,
        message: str,
        project_name: str,
        source_uri: Optional[str] = None,
        destination: Optional[Path] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.project_name = project_name
        self.source_uri = source_uri
        self.destination = destination
        self.cause = cause

    @classmethod
    def already_exists(cls, project_name: str) -> "RepositoryImportError":
        return cls(
            ImportErrorKind.ALREADY_EXISTS,
            f"Destination {project_name} already exists",
            project_name,
        )

    @classmethod
    def provisioning_failed(
        cls, project_name: str, message: str, cause: Optional[BaseException] = None
    ) -> "RepositoryImportError":
        return cls(ImportErrorKind.PROVISIONING_FAILED, message, project_name, cause=cause)

    @classmethod
    def clone_failed(
        cls,
        project_name: str,
        source_uri: str,
        destination: Path,
        cause: Optional[BaseException] = None,
    ) -> "RepositoryImportError":
        return cls(
            ImportErrorKind.CLONE_FAILED,
            f"Unable to fetch from {source_uri} into {destination}",
            project_name,
            source_uri=source_uri,
            destination=destination,
            cause=cause,
        )

    @property
    def is_duplicate(self) -> bool:
        """Someone already imported this target; not a system fault."""
        return self.kind is ImportErrorKind.ALREADY_EXISTS

    @property
    def is_retryable(self) -> bool:
        return self.kind in (ImportErrorKind.PROVISIONING_FAILED, ImportErrorKind.CLONE_FAILED)

    def __repr__(self) -> str:
        return "RepositoryImportError(kind=%s, project_name=%r, message=%r)" % (
            self.kind.name,
            self.project_name,
            self.message,
        )

