"""
Import targets and their location in the local repository storage.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from gitlab_import.core.exceptions import RepositoryImportError

logger = logging.getLogger(__name__)

GIT_DIR_SUFFIX = ".git"


@dataclass(frozen=True)
class ImportTarget:
    """Source repository identified by organisation and repository name."""

    organisation: str
    repository: str

    def __post_init__(self):
        for label, value in (("organisation", self.organisation), ("repository", self.repository)):
            if not value or value in (".", "..") or "/" in value or "\\" in value:
                raise ValueError(f"Invalid {label} name: {value!r}")

    @property
    def project_name(self) -> str:
        """Project path on the destination server."""
        return f"{self.organisation}/{self.repository}"

    def __str__(self) -> str:
        return self.project_name


def destination_path(root: Path, target: ImportTarget) -> Path:
    """Location of the bare repository for ``target`` below ``root``."""
    return Path(root) / target.organisation / (target.repository + GIT_DIR_SUFFIX)


def resolve_destination(root: Path, target: ImportTarget) -> Path:
    """
    Compute the destination of ``target`` and check that it is still free.

    Raises:
        RepositoryImportError: ALREADY_EXISTS if the directory is already there
    """
    path = destination_path(root, target)
    if path.exists():
        logger.info("Destination %s for %s already exists", path, target.project_name)
        raise RepositoryImportError.already_exists(target.project_name)
    return path
