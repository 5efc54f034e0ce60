"""
Creation of destination projects on the GitLab server.

Projects are created as the configured import account rather than as the
administrator owning the API token: an impersonation token is issued for that
account just before the call and revoked right after it.
"""

import logging
from contextlib import contextmanager
from datetime import date, timedelta
from typing import Iterator, Union

import gitlab
import requests
from gitlab.exceptions import GitlabCreateError, GitlabError

from gitlab_import.core.exceptions import ImportToolError, RepositoryImportError

# Configure logging
logger = logging.getLogger(__name__)

IMPERSONATION_TOKEN_NAME = "gitlab-import"
CONFLICT_MARKER = "has already been taken"


class ImpersonationError(ImportToolError):
    """The acting identity could not be assumed."""


def _find_user(client: gitlab.Gitlab, identity: Union[int, str]):
    if isinstance(identity, int):
        return client.users.get(identity)
    users = client.users.list(username=identity)
    if not users:
        raise ImpersonationError(f"No GitLab user named {identity}")
    return users[0]


@contextmanager
def impersonate(
    client: gitlab.Gitlab, identity: Union[int, str], ttl_days: int = 1
) -> Iterator[gitlab.Gitlab]:
    """
    Yield a GitLab client acting as ``identity``.

    The impersonation token backing the client is revoked on exit, whether or
    not the body raised.

    Args:
        client: Administrator client allowed to issue impersonation tokens
        identity: User id or username to act as
        ttl_days: Expiry of the token should revocation fail

    Raises:
        ImpersonationError: If the user or the token cannot be obtained
    """
    try:
        user = _find_user(client, identity)
        token = user.impersonationtokens.create(
            {
                "name": IMPERSONATION_TOKEN_NAME,
                "scopes": ["api"],
                "expires_at": (date.today() + timedelta(days=ttl_days)).isoformat(),
            }
        )
    except (GitlabError, requests.RequestException) as e:
        raise ImpersonationError(f"Unable to impersonate {identity}: {e}") from e

    logger.debug("Acting as GitLab user %s", identity)
    try:
        yield gitlab.Gitlab(url=client.url, private_token=token.token)
    finally:
        try:
            user.impersonationtokens.delete(token.id)
        except (GitlabError, requests.RequestException) as e:
            logger.warning("Failed to revoke impersonation token for %s: %s", identity, e)


def is_conflict(error: GitlabCreateError) -> bool:
    """Tell whether GitLab refused the creation because the project exists."""
    if error.response_code == 409:
        return True
    return error.response_code == 400 and CONFLICT_MARKER in str(error.error_message)


class ProjectProvisioner:
    """Creates empty projects on the destination GitLab instance."""

    def __init__(self, client: gitlab.Gitlab, ttl_days: int = 1):
        """
        Args:
            client: Administrator client for the destination instance
            ttl_days: Lifetime of the impersonation tokens it issues
        """
        self.client = client
        self.ttl_days = ttl_days

    def create_project(self, project_name: str, acting_identity: Union[int, str]) -> None:
        """
        Create ``project_name`` (``namespace/name``) as ``acting_identity``.

        Raises:
            RepositoryImportError: ALREADY_EXISTS if the project is there already,
                PROVISIONING_FAILED for any other failure
        """
        namespace_path, name = project_name.rsplit("/", 1)
        try:
            with impersonate(self.client, acting_identity, self.ttl_days) as acting_client:
                namespace = acting_client.namespaces.get(namespace_path)
                acting_client.projects.create(
                    {
                        "name": name,
                        "path": name,
                        "namespace_id": namespace.id,
                        "visibility": "private",
                        "initialize_with_readme": False,
                    }
                )
        except ImpersonationError as e:
            logger.error("Unable to create request context for %s: %s", project_name, e)
            raise RepositoryImportError.provisioning_failed(
                project_name,
                f"Unable to create request context to create a new project {project_name}",
                e,
            ) from e
        except GitlabCreateError as e:
            if is_conflict(e):
                logger.info("Project %s already exists on %s", project_name, self.client.url)
                raise RepositoryImportError.already_exists(project_name) from e
            logger.error("Failed to create project %s: %s", project_name, e)
            raise RepositoryImportError.provisioning_failed(
                project_name, f"Unable to create repository {project_name}", e
            ) from e
        except (GitlabError, requests.RequestException) as e:
            logger.error("Failed to create project %s: %s", project_name, e)
            raise RepositoryImportError.provisioning_failed(
                project_name, f"Unable to create repository {project_name}", e
            ) from e

        logger.info("Created project %s on %s", project_name, self.client.url)
