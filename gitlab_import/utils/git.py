"""
Thin wrapper around the git command line for bare repositories.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

# Configure logging
logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]

MIRROR_REFSPEC = "refs/*:refs/*"


class GitCommandError(Exception):
    """A git subprocess exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str):
        super().__init__(f"{command} exited with status {returncode}: {stderr.strip()}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


def git_environment() -> Dict[str, str]:
    """Environment for git subprocesses; never prompt for credentials."""
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


class GitRepository:
    """A bare repository on the local filesystem."""

    def __init__(self, git_dir: Path):
        self.git_dir = Path(git_dir)

    def __repr__(self) -> str:
        return f"GitRepository({str(self.git_dir)!r})"

    @classmethod
    def init_bare(cls, git_dir: Path) -> "GitRepository":
        """
        Create an empty bare repository in a directory that must not exist yet.

        Raises:
            FileExistsError: If ``git_dir`` is already there
            GitCommandError: If ``git init`` fails
        """
        git_dir = Path(git_dir)
        git_dir.parent.mkdir(parents=True, exist_ok=True)
        # Exclusive: a concurrent import of the same target loses here
        git_dir.mkdir()
        repo = cls(git_dir)
        repo.run(["init", "--bare", "--quiet", str(git_dir)], git_dir_option=False)
        return repo

    @classmethod
    def open(cls, git_dir: Path) -> "GitRepository":
        """
        Open an existing repository.

        Raises:
            FileNotFoundError: If ``git_dir`` does not exist
            GitCommandError: If ``git_dir`` is not a git repository
        """
        git_dir = Path(git_dir)
        if not git_dir.is_dir():
            raise FileNotFoundError(f"Repository directory does not exist: {git_dir}")
        repo = cls(git_dir)
        repo.run(["rev-parse", "--git-dir"])
        return repo

    def command(self, args: List[str], git_dir_option: bool = True) -> List[str]:
        if git_dir_option:
            return ["git", "--git-dir", str(self.git_dir)] + args
        return ["git"] + args

    def run(self, args: List[str], git_dir_option: bool = True) -> str:
        """
        Run a git command against this repository and return its stdout.

        Raises:
            GitCommandError: If git exits with a non-zero status
        """
        command = self.command(args, git_dir_option)
        logger.debug("Running git command: %s", " ".join(command))
        process = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=git_environment(),
            universal_newlines=True,
            check=False,
        )
        if process.returncode != 0:
            raise GitCommandError(" ".join(command[:4]), process.returncode, process.stderr)
        return process.stdout

    def fetch(
        self,
        remote: str,
        refspecs: Tuple[str, ...] = (MIRROR_REFSPEC,),
        progress: Optional[ProgressSink] = None,
        redact: Callable[[str], str] = lambda text: text,
    ) -> None:
        """
        Fetch ``refspecs`` from ``remote`` into this repository.

        Progress lines written by git are passed to ``progress`` as they arrive.
        ``redact`` is applied to everything that leaves this method (log lines,
        progress lines, error text) so credentials in ``remote`` stay private.

        Raises:
            GitCommandError: If git exits with a non-zero status
        """
        args = ["fetch", "--no-tags"]
        if progress is not None:
            args.append("--progress")
        command = self.command(args + [remote] + list(refspecs))
        logger.debug("Running git command: %s", redact(" ".join(command)))

        stderr_lines = []
        with subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            env=git_environment(),
            # Universal newlines turn the carriage returns of progress meters into lines
            universal_newlines=True,
        ) as process:
            try:
                for line in iter(process.stderr.readline, ""):
                    line = redact(line.rstrip("\n"))
                    if not line:
                        continue
                    stderr_lines.append(line)
                    if progress is not None:
                        progress(line)
            except BaseException:
                # The sink or the reader failed; do not leave git running
                process.kill()
                process.wait()
                raise
            returncode = process.wait()

        if returncode != 0:
            # Progress meters are noise in an error message
            details = [line for line in stderr_lines if "%" not in line] or stderr_lines
            raise GitCommandError("git fetch", returncode, "\n".join(details[-20:]))

    def list_refs(self) -> Dict[str, str]:
        """Map every ref name in the repository to the object id it points at."""
        output = self.run(["for-each-ref", "--format=%(objectname) %(refname)"])
        refs = {}
        for line in output.splitlines():
            if line.strip():
                object_id, ref_name = line.split(" ", 1)
                refs[ref_name] = object_id
        return refs
