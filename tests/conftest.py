"""
Pytest configuration and shared fixtures for test suite.

Provides an in-memory VCS fake, a factory for real temporary git
repositories, and resolver option helpers.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from gitversion.resolver import ResolveOptions
from tests.mocks.mock_vcs import InMemoryVcs


class GitRepository:
    """A real git repository in a temporary directory."""

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self.git('init', '-q')
        # Pin the initial branch name regardless of the user's init.defaultBranch
        self.git('symbolic-ref', 'HEAD', 'refs/heads/main')
        self.git('config', 'user.name', 'GitVersion Test')
        self.git('config', 'user.email', 'test@example.com')
        self.git('config', 'commit.gpgsign', 'false')
        self.git('config', 'tag.gpgsign', 'false')

    def git(self, *args) -> str:
        result = subprocess.run(
            ['git', *args],
            cwd=self.root_dir,
            check=True,
            capture_output=True,
            text=True
        )
        return result.stdout.strip()

    def write(self, filename: str, content: str = '') -> None:
        file_path = self.root_dir / filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding='utf-8')

    def append(self, filename: str, content: str) -> None:
        with open(self.root_dir / filename, 'a', encoding='utf-8') as f:
            f.write(content)

    def commit(self, message: str = 'Test commit', filename: str = None) -> str:
        """Commit a change (a new file by default) and return the full hash."""
        if filename is None:
            filename = f'file{self.commit_count()}.txt'
        self.write(filename, message)
        self.git('add', filename)
        self.git('commit', '-q', '-m', message)
        return self.git('rev-parse', 'HEAD')

    def tag(self, name: str) -> None:
        self.git('tag', name)

    def checkout(self, ref: str, create: bool = False) -> None:
        if create:
            self.git('checkout', '-q', '-b', ref)
        else:
            self.git('checkout', '-q', ref)

    def commit_count(self) -> int:
        try:
            return int(self.git('rev-list', '--count', 'HEAD'))
        except subprocess.CalledProcessError:
            return 0

    def short_hash(self, length: int = 9) -> str:
        return self.git('rev-parse', f'--short={length}', 'HEAD')


@pytest.fixture
def fake_vcs():
    """Create an empty in-memory VCS."""
    return InMemoryVcs()


@pytest.fixture
def fake_repo(fake_vcs, tmp_path):
    """Create an in-memory repository rooted at a temporary directory."""
    return fake_vcs.create_repository(str(tmp_path))


@pytest.fixture
def make_options(tmp_path):
    """Factory for ResolveOptions rooted at the temporary directory."""
    def _make(**kwargs):
        kwargs.setdefault('root_dir', str(tmp_path))
        return ResolveOptions(**kwargs)
    return _make


@pytest.fixture
def git_repo(tmp_path):
    """Create a real git repository in a temporary directory."""
    if shutil.which('git') is None:
        pytest.skip('git executable not available')
    return GitRepository(tmp_path / 'repo')


@pytest.fixture
def make_git_repo(tmp_path):
    """Factory for real git repositories at arbitrary paths."""
    if shutil.which('git') is None:
        pytest.skip('git executable not available')

    def _make(path) -> GitRepository:
        return GitRepository(Path(path))
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GITVERSION_* and LOG_LEVEL variables for the duration of a test."""
    for key in list(os.environ):
        if key.startswith('GITVERSION_') or key == 'LOG_LEVEL':
            monkeypatch.delenv(key)
