"""
Full-mirror fetch of a source repository into the local repository storage.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from gitlab_import.core.exceptions import RepositoryImportError
from gitlab_import.core.source import Credentials
from gitlab_import.utils.git import MIRROR_REFSPEC, GitCommandError, GitRepository, ProgressSink

logger = logging.getLogger(__name__)


class FetchExecutor:
    """Populates a local bare repository with every ref of a source repository."""

    def create_repository(self, destination: Path, project_name: str) -> GitRepository:
        """
        Create the empty repository shell at ``destination``.

        Raises:
            RepositoryImportError: ALREADY_EXISTS if the directory is already there,
                e.g. created by another import since the destination was resolved
        """
        try:
            return GitRepository.init_bare(destination)
        except FileExistsError as e:
            logger.warning("Destination %s appeared while importing %s", destination, project_name)
            raise RepositoryImportError.already_exists(project_name) from e

    def fetch(
        self,
        destination: Path,
        source_uri: str,
        project_name: str,
        credentials: Optional[Credentials] = None,
        progress: Optional[ProgressSink] = None,
    ) -> None:
        """
        Mirror all refs of ``source_uri`` into the repository at ``destination``.

        Args:
            destination: Local bare repository to create; must not exist
            source_uri: Fetchable URI of the source repository, without credentials
            project_name: Import target, for error reporting
            credentials: Attached to this fetch only, never stored in the repository
            progress: Receives git progress lines; fetch is silent without it

        Raises:
            RepositoryImportError: ALREADY_EXISTS if ``destination`` exists,
                CLONE_FAILED on any I/O or transport failure or a failing progress sink
        """
        remote = credentials.apply_to(source_uri) if credentials else source_uri
        redact = credentials.mask if credentials else (lambda text: text)

        try:
            repository = self.create_repository(destination, project_name)
            logger.info("%s| Clone into %s", source_uri, destination)
            repository.fetch(remote, (MIRROR_REFSPEC,), progress=progress, redact=redact)
        except RepositoryImportError:
            raise
        except (GitCommandError, OSError, subprocess.SubprocessError) as e:
            logger.error(
                "Unable to fetch from %s into %s: %s", source_uri, destination, redact(str(e))
            )
            raise RepositoryImportError.clone_failed(
                project_name, source_uri, destination, e
            ) from e
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                "Fetch from %s into %s aborted: %s", source_uri, destination, redact(str(e))
            )
            raise RepositoryImportError.clone_failed(
                project_name, source_uri, destination, e
            ) from e
