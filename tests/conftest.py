"""Pytest fixtures for git-worktree-keeper tests"""
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_worktree_keeper.models.branch import BranchRecord, BranchStatus
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import (
    DirtyStatus,
    PRState,
    PullRequestStatus,
    TrackingStatus,
    WorktreeRecord,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve symlinked temp roots (macOS /var -> /private/var)
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_config():
    """Create a configuration dictionary."""
    return {
        'verbose': False,
        'debug': False,
        'protected_branches': ['main', 'master'],
        'main_branch': 'main',
        'stash_stale_days': 30,
        'dry_run': False,
        'bypass_github': True,  # Never reach the network from tests
        'github_token': None,
    }


def _commit_file(repo, name, content, message):
    path = Path(repo.working_tree_dir) / name
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository on main with a local bare remote."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    _commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    remote = git.Repo.init(str(temp_dir / "remote.git"), bare=True)
    remote.close()
    repo.create_remote('origin', str(temp_dir / "remote.git"))
    repo.git.push('-u', 'origin', 'main')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def repo_with_worktrees(git_repo, temp_dir):
    """Repository with linked worktrees, branches and stashes.

    - feat-gone: worktree whose upstream was deleted on the remote
    - feat-local: worktree on a branch that was never pushed
    - detached: worktree with a detached HEAD
    - orphan-local: local-only branch without a worktree
    - stash@{1}: temporary branch-switch stash on main
    - stash@{0}: regular stash on main
    """
    repo = git_repo
    worktrees_dir = temp_dir / "worktrees"
    worktrees_dir.mkdir()

    repo.git.worktree('add', '-b', 'feat-gone', str(worktrees_dir / "feat-gone"))
    gone = git.Repo(str(worktrees_dir / "feat-gone"))
    _commit_file(gone, "gone.txt", "gone\n", "Work on feat-gone")
    gone.close()
    repo.git.push('-u', 'origin', 'feat-gone')
    repo.git.push('origin', '--delete', 'feat-gone')

    repo.git.worktree('add', '-b', 'feat-local', str(worktrees_dir / "feat-local"))
    local = git.Repo(str(worktrees_dir / "feat-local"))
    _commit_file(local, "local.txt", "local\n", "Work on feat-local")
    local.close()

    repo.git.worktree('add', '--detach', str(worktrees_dir / "detached"))

    repo.git.branch('orphan-local')

    readme = Path(repo.working_tree_dir) / "README.md"
    readme.write_text("# Test Repository\ntemp change\n")
    repo.git.stash('push', '-m', 'temp stash for branch switch')
    readme.write_text("# Test Repository\nreal work\n")
    repo.git.stash('push', '-m', 'half-finished docs')

    yield repo


@pytest.fixture
def make_worktree():
    """Factory for WorktreeRecord with sensible defaults for a linked worktree."""
    def _make(path="/repo/wt/feat-x", branch="feat-x", **overrides):
        fields = dict(
            path=path,
            branch=branch,
            head_commit="abc12345",
            dirty=DirtyStatus(),
            tracking=TrackingStatus.UP_TO_DATE,
            pr_status=PullRequestStatus.none(),
            is_current=False,
            is_primary=False,
        )
        fields.update(overrides)
        return WorktreeRecord(**fields)
    return _make


@pytest.fixture
def primary_worktree(make_worktree):
    return make_worktree(
        path="/repo",
        branch="main",
        is_primary=True,
        is_current=True,
        tracking=TrackingStatus.UP_TO_DATE,
    )


@pytest.fixture
def make_stash():
    def _make(index=0, branch="main", message="work in progress", age_days=1, **overrides):
        fields = dict(
            index=index,
            branch=branch,
            message=message,
            diff_stat="1 file changed, 1 insertion(+)",
            commit=f"{index:040x}",
            created_at=NOW - timedelta(days=age_days) if age_days is not None else None,
        )
        fields.update(overrides)
        return StashRecord(**fields)
    return _make


@pytest.fixture
def make_branch():
    def _make(name="feat-x", tracking=TrackingStatus.UP_TO_DATE, **overrides):
        status = {
            TrackingStatus.GONE: BranchStatus.GONE,
            TrackingStatus.AHEAD: BranchStatus.AHEAD,
            TrackingStatus.BEHIND: BranchStatus.BEHIND,
            TrackingStatus.NO_REMOTE: BranchStatus.LOCAL_ONLY,
        }.get(tracking, BranchStatus.UP_TO_DATE)
        fields = dict(name=name, tracking=tracking, status=status)
        fields.update(overrides)
        return BranchRecord(**fields)
    return _make


@pytest.fixture
def merged_pr():
    return PullRequestStatus(PRState.MERGED, 12)


@pytest.fixture
def mock_github():
    """Create a mock GitHub API object."""
    github = Mock()

    repo = Mock()
    repo.full_name = "test/repo"
    repo.get_pulls = Mock(return_value=[])

    github.get_repo = Mock(return_value=repo)

    return github
