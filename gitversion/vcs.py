"""
Git collaborator for version resolution.

The resolution algorithm only talks to the narrow, read-only VcsBackend
interface. GitBackend is the production adapter that shells out to ``git``;
tests substitute an in-memory fake.
"""

import os
import shutil
import subprocess
from typing import List, Optional

from loguru import logger

# git's stderr when discovery finds no enclosing repository; a broken
# .git file reads "not a git repository: <path>" instead
_NOT_A_REPOSITORY = 'not a git repository (or any'


def _git_env() -> dict:
    """Environment for git with untranslated messages, so stderr can be matched."""
    return dict(os.environ, LC_ALL='C', LANGUAGE='C')


class VcsInvocationError(Exception):
    """
    Raised when the VCS tool cannot be run or fails on a query that must
    succeed for a valid work tree.

    Distinct from an absent tag or an empty history, which are ordinary
    inputs to the resolver's fallback path.
    """
    pass


class VcsBackend:
    """Read-only queries the resolver needs from a version-control system."""

    def is_repository(self, path: str) -> bool:
        """Whether ``path`` lies inside a work tree."""
        raise NotImplementedError

    def latest_tag(self, path: str, pattern: str) -> Optional[str]:
        """Nearest tag reachable from HEAD matching glob ``pattern``, or None."""
        raise NotImplementedError

    def commits_since(self, path: str, tag: str) -> int:
        """Number of commits reachable from HEAD but not from ``tag``."""
        raise NotImplementedError

    def abbreviated_hash(self, path: str, length: int) -> Optional[str]:
        """Abbreviated HEAD hash, or None when there are no commits."""
        raise NotImplementedError

    def is_dirty(self, path: str) -> bool:
        """Whether tracked files differ from the last commit."""
        raise NotImplementedError

    def branch_name(self, path: str) -> Optional[str]:
        """Current branch name, or None when HEAD is detached."""
        raise NotImplementedError

    def head_file(self, path: str) -> Optional[str]:
        """Path of the repository's HEAD file, used as a reconfigure trigger."""
        return None


class GitBackend(VcsBackend):
    """VcsBackend that runs the ``git`` executable."""

    def __init__(self, git_executable: Optional[str] = None, timeout: Optional[float] = None):
        """
        Args:
            git_executable: Path to git (default: looked up on PATH)
            timeout: Per-command timeout in seconds (default: no timeout)
        """
        self.git_executable = git_executable or shutil.which('git') or 'git'
        self.timeout = timeout

    def _run(self, path: str, *args: str) -> subprocess.CompletedProcess:
        """
        Run ``git -C <path> <args>`` and return the completed process.

        Non-zero exit codes are returned to the caller, which decides whether
        they mean absence or failure.

        Raises:
            VcsInvocationError: If git cannot be launched or times out
        """
        cmd: List[str] = [self.git_executable, '-C', path, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                env=_git_env(),
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise VcsInvocationError(f"Git executable not found: {self.git_executable}") from e
        except PermissionError as e:
            raise VcsInvocationError(f"Permission denied running {self.git_executable}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise VcsInvocationError(f"Git command timed out after {self.timeout}s: {' '.join(args)}") from e
        except OSError as e:
            raise VcsInvocationError(f"Failed to run git: {e}") from e

        if result.returncode != 0:
            logger.debug(f"git {args[0]} exited with {result.returncode}: {result.stderr.strip()}")
        return result

    def _require(self, path: str, *args: str) -> str:
        """Run a query that must succeed on a valid work tree."""
        result = self._run(path, *args)
        if result.returncode != 0:
            raise VcsInvocationError(
                f"'git {' '.join(args)}' failed in {path} (exit code {result.returncode}): "
                f"{result.stderr.strip()}"
            )
        return result.stdout.strip()

    def is_repository(self, path: str) -> bool:
        """
        Raises:
            VcsInvocationError: If git fails for any reason other than the
                directory not being in a repository (dubious ownership,
                corrupt .git, permissions)
        """
        if not os.path.isdir(path):
            return False
        result = self._run(path, 'rev-parse', '--is-inside-work-tree')
        if result.returncode != 0:
            if _NOT_A_REPOSITORY in result.stderr.lower():
                return False
            raise VcsInvocationError(
                f"'git rev-parse' failed in {path} (exit code {result.returncode}): "
                f"{result.stderr.strip()}"
            )
        # "false" inside a .git directory or a bare repository
        return result.stdout.strip() == 'true'

    def latest_tag(self, path: str, pattern: str) -> Optional[str]:
        # describe fails both for "no matching tag" and "no commits yet"
        result = self._run(path, 'describe', '--tags', '--abbrev=0', '--match', pattern)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def commits_since(self, path: str, tag: str) -> int:
        output = self._require(path, 'rev-list', '--count', f'refs/tags/{tag}..HEAD')
        try:
            return int(output)
        except ValueError as e:
            raise VcsInvocationError(f"Unexpected output from git rev-list: {output!r}") from e

    def abbreviated_hash(self, path: str, length: int) -> Optional[str]:
        # Exit code 1 from --verify -q means HEAD does not point at a commit yet
        if self._run(path, 'rev-parse', '--verify', '-q', 'HEAD').returncode != 0:
            return None
        return self._require(path, 'rev-parse', f'--short={length}', 'HEAD')

    def is_dirty(self, path: str) -> bool:
        return bool(self._require(path, 'status', '--porcelain', '--untracked-files=no'))

    def branch_name(self, path: str) -> Optional[str]:
        result = self._run(path, 'symbolic-ref', '--short', '-q', 'HEAD')
        if result.returncode == 1:
            return None
        if result.returncode != 0:
            raise VcsInvocationError(
                f"'git symbolic-ref' failed in {path} (exit code {result.returncode}): "
                f"{result.stderr.strip()}"
            )
        return result.stdout.strip() or None

    def head_file(self, path: str) -> Optional[str]:
        result = self._run(path, 'rev-parse', '--absolute-git-dir')
        if result.returncode != 0:
            return None
        return os.path.join(result.stdout.strip(), 'HEAD')
