"""
Import step: provision the destination project, then mirror the source into it.

Rollback is never automatic. After a failed ``do_import`` the caller decides
whether to retry in place or to call ``rollback()``, which removes the local
repository. The project created on GitLab is left alone in both cases.
"""

import enum
import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from gitlab_import.core.config import ImportConfig
from gitlab_import.core.exceptions import RepositoryImportError
from gitlab_import.core.fetch import FetchExecutor
from gitlab_import.core.paths import ImportTarget, resolve_destination
from gitlab_import.core.provisioner import ProjectProvisioner
from gitlab_import.core.source import (
    CredentialProvider,
    SourceUriResolver,
    StaticCredentialProvider,
)
from gitlab_import.utils.git import ProgressSink

# Configure logging
logger = logging.getLogger(__name__)


class ImportState(enum.Enum):
    NOT_STARTED = "not_started"
    PROVISIONING = "provisioning"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ImportStep:
    """One attempt at importing one repository. Not reusable."""

    def __init__(
        self,
        target: ImportTarget,
        destination: Path,
        provisioner: ProjectProvisioner,
        acting_identity: Union[int, str],
        uri_resolver: SourceUriResolver,
        credential_provider: CredentialProvider,
        fetch_executor: FetchExecutor,
    ):
        self.target = target
        self.destination = destination
        self.provisioner = provisioner
        self.acting_identity = acting_identity
        self.uri_resolver = uri_resolver
        self.credential_provider = credential_provider
        self.fetch_executor = fetch_executor
        self.state = ImportState.NOT_STARTED
        self.owns_destination = True

    def __repr__(self) -> str:
        return f"ImportStep({self.target.project_name!r}, state={self.state.name})"

    @property
    def source_uri(self) -> str:
        return self.uri_resolver.resolve(self.target)

    def do_import(self, progress: Optional[ProgressSink] = None) -> None:
        """
        Create the destination project and mirror every ref of the source into
        the local repository.

        Args:
            progress: Optional callable receiving fetch progress lines

        Raises:
            RepositoryImportError: On any failure; the step is then FAILED
            RuntimeError: If the step has already been run
        """
        if self.state is not ImportState.NOT_STARTED:
            raise RuntimeError(f"{self!r} has already been run")

        project_name = self.target.project_name
        try:
            self.state = ImportState.PROVISIONING
            self.provisioner.create_project(project_name, self.acting_identity)

            self.state = ImportState.FETCHING
            self.fetch_executor.fetch(
                self.destination,
                self.source_uri,
                project_name,
                credentials=self.credential_provider.get_credentials(),
                progress=progress,
            )
        except RepositoryImportError as e:
            logger.error("Import of %s failed while %s: %s", project_name, self.state.value, e)
            if e.is_duplicate:
                # Whatever is at the destination belongs to another import
                self.owns_destination = False
            self.state = ImportState.FAILED
            raise
        except Exception as e:
            logger.error("Import of %s aborted while %s: %s", project_name, self.state.value, e)
            self.state = ImportState.FAILED
            raise

        self.state = ImportState.SUCCEEDED
        logger.info("Imported %s into %s", project_name, self.destination)

    def rollback(self) -> bool:
        """
        Remove the local repository created by this step.

        Returns:
            True if the directory was deleted, False if there was nothing to
            delete, the directory belongs to another import, or the deletion did
            not complete
        """
        if not self.destination.exists():
            logger.debug("Nothing to roll back for %s", self.target.project_name)
            return False

        if not self.owns_destination:
            logger.warning(
                "Not removing %s, it was not created by this import", self.destination
            )
            return False

        try:
            shutil.rmtree(self.destination)
        except OSError as e:
            logger.error("Cannot clean-up output Git directory %s: %s", self.destination, e)
            return False

        logger.info("Removed %s", self.destination)
        return True


class ImportStepFactory:
    """Builds import steps sharing one set of collaborators."""

    def __init__(
        self,
        git_dir: Path,
        provisioner: ProjectProvisioner,
        acting_identity: Union[int, str],
        uri_resolver: SourceUriResolver,
        credential_provider: CredentialProvider,
        fetch_executor: Optional[FetchExecutor] = None,
    ):
        self.git_dir = Path(git_dir)
        self.provisioner = provisioner
        self.acting_identity = acting_identity
        self.uri_resolver = uri_resolver
        self.credential_provider = credential_provider
        self.fetch_executor = fetch_executor or FetchExecutor()

    @classmethod
    def from_config(cls, config: ImportConfig) -> "ImportStepFactory":
        """Wire the GitLab, source and git collaborators described by ``config``."""
        return cls(
            git_dir=config.git_dir,
            provisioner=ProjectProvisioner(config.target.get_client(), config.token_ttl_days),
            acting_identity=config.import_account,
            uri_resolver=SourceUriResolver(config.source_url),
            credential_provider=StaticCredentialProvider.from_token(
                config.source_username, config.source_token
            ),
        )

    def create(self, organisation: str, repository: str) -> ImportStep:
        """
        Prepare the import of ``organisation/repository``.

        Raises:
            RepositoryImportError: ALREADY_EXISTS if the local repository exists
            ValueError: If either name is not a valid single path segment
        """
        target = ImportTarget(organisation, repository)
        logger.debug("Preparing import of %s", target.project_name)
        destination = resolve_destination(self.git_dir, target)
        return ImportStep(
            target,
            destination,
            self.provisioner,
            self.acting_identity,
            self.uri_resolver,
            self.credential_provider,
            self.fetch_executor,
        )
