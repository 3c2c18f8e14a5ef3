"""
Tests for vcs.py module.

GitBackend is tested against a patched subprocess.run for error mapping,
and against real temporary repositories where git is available.
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from gitversion.vcs import GitBackend, VcsBackend, VcsInvocationError


def completed(returncode=0, stdout='', stderr=''):
    return subprocess.CompletedProcess(args=['git'], returncode=returncode, stdout=stdout, stderr=stderr)


class TestVcsBackend:
    """Test the abstract interface."""

    def test_abstract_methods_raise(self):
        backend = VcsBackend()
        with pytest.raises(NotImplementedError):
            backend.is_repository('.')
        with pytest.raises(NotImplementedError):
            backend.latest_tag('.', '*.*.*')

    def test_head_file_defaults_to_none(self):
        assert VcsBackend().head_file('.') is None


class TestGitBackendErrors:
    """Test mapping of process failures onto VcsInvocationError."""

    @patch('gitversion.vcs.subprocess.run')
    def test_command_line(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='true\n')
        backend = GitBackend('/usr/bin/git')

        assert backend.is_repository(str(tmp_path)) is True

        cmd = mock_run.call_args[0][0]
        assert cmd == ['/usr/bin/git', '-C', str(tmp_path), 'rev-parse', '--is-inside-work-tree']

    @patch('gitversion.vcs.subprocess.run', side_effect=FileNotFoundError('git'))
    def test_missing_executable(self, mock_run, tmp_path):
        backend = GitBackend('/nonexistent/git')
        with pytest.raises(VcsInvocationError, match='not found'):
            backend.is_repository(str(tmp_path))

    @patch('gitversion.vcs.subprocess.run', side_effect=PermissionError('denied'))
    def test_permission_denied(self, mock_run, tmp_path):
        with pytest.raises(VcsInvocationError, match='Permission denied'):
            GitBackend('git').is_dirty(str(tmp_path))

    @patch('gitversion.vcs.subprocess.run', side_effect=subprocess.TimeoutExpired(cmd='git', timeout=5))
    def test_timeout(self, mock_run, tmp_path):
        with pytest.raises(VcsInvocationError, match='timed out'):
            GitBackend('git', timeout=5).latest_tag(str(tmp_path), '*.*.*')

    def test_is_repository_missing_directory(self, tmp_path):
        with patch('gitversion.vcs.subprocess.run') as mock_run:
            assert GitBackend('git').is_repository(str(tmp_path / 'missing')) is False
            mock_run.assert_not_called()

    @patch('gitversion.vcs.subprocess.run')
    def test_is_repository_outside_work_tree(self, mock_run, tmp_path):
        mock_run.return_value = completed(
            128, stderr='fatal: not a git repository (or any of the parent directories): .git'
        )
        assert GitBackend('git').is_repository(str(tmp_path)) is False

    @patch('gitversion.vcs.subprocess.run')
    def test_is_repository_dubious_ownership_raises(self, mock_run, tmp_path):
        """An unusable repository is a failure, not an absent one."""
        mock_run.return_value = completed(
            128, stderr=f"fatal: detected dubious ownership in repository at '{tmp_path}'"
        )
        with pytest.raises(VcsInvocationError, match='dubious ownership'):
            GitBackend('git').is_repository(str(tmp_path))

    @patch('gitversion.vcs.subprocess.run')
    def test_is_repository_broken_gitfile_raises(self, mock_run, tmp_path):
        mock_run.return_value = completed(128, stderr='fatal: not a git repository: /gone/.git')
        with pytest.raises(VcsInvocationError):
            GitBackend('git').is_repository(str(tmp_path))

    @patch('gitversion.vcs.subprocess.run')
    def test_is_repository_inside_git_dir(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='false\n')
        assert GitBackend('git').is_repository(str(tmp_path)) is False

    @patch('gitversion.vcs.subprocess.run')
    def test_messages_untranslated(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='true\n')
        with patch.dict('os.environ', {'LANG': 'de_DE.UTF-8'}):
            GitBackend('git').is_repository(str(tmp_path))
        env = mock_run.call_args[1]['env']
        assert env['LC_ALL'] == 'C'
        assert env['LANG'] == 'de_DE.UTF-8'

    @patch('gitversion.vcs.subprocess.run')
    def test_latest_tag_absent(self, mock_run, tmp_path):
        mock_run.return_value = completed(128, stderr='fatal: No names found')
        assert GitBackend('git').latest_tag(str(tmp_path), 'v*.*.*') is None

    @patch('gitversion.vcs.subprocess.run')
    def test_latest_tag_found(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='v1.2.3\n')
        assert GitBackend('git').latest_tag(str(tmp_path), 'v*.*.*') == 'v1.2.3'
        assert mock_run.call_args[0][0][-2:] == ['--match', 'v*.*.*']

    @patch('gitversion.vcs.subprocess.run')
    def test_commits_since_failure_raises(self, mock_run, tmp_path):
        mock_run.return_value = completed(128, stderr='fatal: bad revision')
        with pytest.raises(VcsInvocationError, match='rev-list'):
            GitBackend('git').commits_since(str(tmp_path), '1.0.0')

    @patch('gitversion.vcs.subprocess.run')
    def test_commits_since_garbage_output(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='lots\n')
        with pytest.raises(VcsInvocationError):
            GitBackend('git').commits_since(str(tmp_path), '1.0.0')

    @patch('gitversion.vcs.subprocess.run')
    def test_abbreviated_hash_without_commits(self, mock_run, tmp_path):
        mock_run.return_value = completed(1)
        assert GitBackend('git').abbreviated_hash(str(tmp_path), 9) is None
        assert mock_run.call_count == 1

    @patch('gitversion.vcs.subprocess.run')
    def test_abbreviated_hash(self, mock_run, tmp_path):
        mock_run.side_effect = [completed(stdout='a' * 40 + '\n'), completed(stdout='abcdef1\n')]
        assert GitBackend('git').abbreviated_hash(str(tmp_path), 7) == 'abcdef1'
        assert '--short=7' in mock_run.call_args[0][0]

    @patch('gitversion.vcs.subprocess.run')
    def test_is_dirty(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout=' M file.txt\n')
        assert GitBackend('git').is_dirty(str(tmp_path)) is True
        assert '--untracked-files=no' in mock_run.call_args[0][0]

    @patch('gitversion.vcs.subprocess.run')
    def test_is_clean(self, mock_run, tmp_path):
        mock_run.return_value = completed(stdout='')
        assert GitBackend('git').is_dirty(str(tmp_path)) is False

    @patch('gitversion.vcs.subprocess.run')
    def test_branch_name_detached(self, mock_run, tmp_path):
        mock_run.return_value = completed(1)
        assert GitBackend('git').branch_name(str(tmp_path)) is None

    @patch('gitversion.vcs.subprocess.run')
    def test_branch_name_failure_raises(self, mock_run, tmp_path):
        mock_run.return_value = completed(128, stderr='fatal: not a git repository')
        with pytest.raises(VcsInvocationError):
            GitBackend('git').branch_name(str(tmp_path))

    @patch('gitversion.vcs.subprocess.run')
    def test_head_file(self, mock_run, tmp_path):
        git_dir = str(tmp_path / '.git')
        mock_run.return_value = completed(stdout=git_dir + '\n')
        assert GitBackend('git').head_file(str(tmp_path)) == os.path.join(git_dir, 'HEAD')


@pytest.mark.integration
class TestGitBackendRealRepository:
    """Test GitBackend against real repositories."""

    def test_empty_repository(self, git_repo):
        backend = GitBackend()
        path = str(git_repo.root_dir)

        assert backend.is_repository(path) is True
        assert backend.latest_tag(path, '*.*.*') is None
        assert backend.abbreviated_hash(path, 9) is None
        assert backend.branch_name(path) == 'main'

    def test_queries(self, git_repo):
        backend = GitBackend()
        path = str(git_repo.root_dir)
        git_repo.commit('first')
        git_repo.tag('1.0.0')
        git_repo.commit('second')
        git_repo.commit('third')

        assert backend.latest_tag(path, '*.*.*') == '1.0.0'
        assert backend.commits_since(path, '1.0.0') == 2
        assert backend.abbreviated_hash(path, 9) == git_repo.short_hash(9)
        assert backend.is_dirty(path) is False
        assert os.path.isfile(backend.head_file(path))

    def test_untracked_files_are_clean(self, git_repo):
        git_repo.commit('first')
        git_repo.write('untracked.txt', 'new')
        assert GitBackend().is_dirty(str(git_repo.root_dir)) is False

    def test_modified_tracked_file_is_dirty(self, git_repo):
        git_repo.commit('first', filename='tracked.txt')
        git_repo.append('tracked.txt', 'change')
        assert GitBackend().is_dirty(str(git_repo.root_dir)) is True

    def test_detached_head(self, git_repo):
        first = git_repo.commit('first')
        git_repo.commit('second')
        git_repo.checkout(first)
        assert GitBackend().branch_name(str(git_repo.root_dir)) is None

    def test_broken_gitfile_raises(self, git_repo, tmp_path):
        """A .git file pointing nowhere is reported, not mistaken for a plain directory."""
        broken = tmp_path / 'broken'
        broken.mkdir()
        (broken / '.git').write_text('gitdir: /nonexistent/gitversion/.git\n', encoding='utf-8')

        with pytest.raises(VcsInvocationError):
            GitBackend().is_repository(str(broken))
