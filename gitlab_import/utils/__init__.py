"""Utility modules for the GitLab import tool."""

from gitlab_import.utils.git import MIRROR_REFSPEC, GitCommandError, GitRepository

__all__ = [
    "GitCommandError",
    "GitRepository",
    "MIRROR_REFSPEC",
]
