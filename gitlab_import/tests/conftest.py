"""
Shared fixtures: throwaway source repositories and a mocked GitLab server.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List
from unittest import mock

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Import Test",
    "GIT_AUTHOR_EMAIL": "import@example.com",
    "GIT_COMMITTER_NAME": "Import Test",
    "GIT_COMMITTER_EMAIL": "import@example.com",
}


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` for test setup, failing loudly."""
    env = os.environ.copy()
    env.update(GIT_IDENTITY)
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", *args],
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        universal_newlines=True,
        check=True,
    )
    return result.stdout.strip()


def make_source_repository(path: Path, notes: bool = False) -> Dict[str, str]:
    """
    Create a repository with ``refs/heads/main`` and ``refs/tags/v1``.

    Returns:
        Expected mirror: ref name -> object id
    """
    path.mkdir(parents=True)
    git(path, "init", "--quiet")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    (path / "README.md").write_text("widgets\n")
    git(path, "add", "README.md")
    git(path, "commit", "--quiet", "-m", "Initial commit")
    git(path, "tag", "v1")
    if notes:
        git(path, "notes", "add", "-m", "reviewed", "HEAD")

    refs = {}
    for line in git(path, "for-each-ref", "--format=%(objectname) %(refname)").splitlines():
        object_id, ref_name = line.split(" ", 1)
        refs[ref_name] = object_id
    return refs


@pytest.fixture
def source_root(tmp_path) -> Path:
    """Directory standing in for the source server: ``<root>/<org>/<repo>.git``."""
    root = tmp_path / "source"
    root.mkdir()
    return root


@pytest.fixture
def git_root(tmp_path) -> Path:
    root = tmp_path / "data" / "git"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def gitlab_client():
    """Administrator client whose impersonated clients share ``acting``."""
    client = mock.MagicMock(name="gitlab_admin")
    client.url = "https://gitlab.example.com"

    user = mock.MagicMock(name="import_user")
    user.impersonationtokens.create.return_value = mock.MagicMock(id=7, token="glpat-impersonated")
    client.users.get.return_value = user
    client.users.list.return_value = [user]
    client.user = user
    return client


@pytest.fixture
def acting_client():
    client = mock.MagicMock(name="gitlab_acting")
    client.namespaces.get.return_value = mock.MagicMock(id=42)
    return client


@pytest.fixture
def patched_gitlab(acting_client):
    """Make ``gitlab.Gitlab(...)`` inside the provisioner return ``acting_client``."""
    with mock.patch(
        "gitlab_import.core.provisioner.gitlab.Gitlab", return_value=acting_client
    ) as factory:
        yield factory


class RecordingSink:
    """Progress sink remembering every line it received."""

    def __init__(self):
        self.lines: List[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)
