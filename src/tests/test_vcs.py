"""Tests for git-based page versioning."""

import shutil

import pytest

from plainwiki.config import Settings
from plainwiki.core.storage import PageStore
from plainwiki.core.vcs import (
    INITIAL_MESSAGE,
    UPDATE_MESSAGE,
    GitVersionControl,
    NullVersionControl,
    build_version_control,
)

from conftest import FakeGit


@pytest.fixture
def page_dir(tmp_path):
    directory = tmp_path / "main"
    directory.mkdir()
    (directory / "content.md").write_text("hello", encoding="utf-8")
    return directory


# ============================================================
# Commit sequence (fake git)
# ============================================================


class TestOnContentChanged:
    def test_first_change_initializes_and_commits_twice(self, page_dir, fake_git):
        vcs = GitVersionControl(runner=fake_git)
        assert vcs.on_content_changed(page_dir, "content.md") is True

        subcommands = [args[0] for args, _ in fake_git.calls]
        assert subcommands == ["init", "add", "commit", "add", "commit"]
        assert fake_git.commit_messages() == [INITIAL_MESSAGE, UPDATE_MESSAGE]

    def test_later_change_commits_once(self, page_dir, fake_git):
        vcs = GitVersionControl(runner=fake_git)
        vcs.on_content_changed(page_dir, "content.md")
        fake_git.calls.clear()

        assert vcs.on_content_changed(page_dir, "content.md") is True
        assert fake_git.commit_messages() == [UPDATE_MESSAGE]

    def test_commands_run_in_page_directory(self, page_dir, fake_git):
        GitVersionControl(runner=fake_git).on_content_changed(page_dir, "content.md")
        assert all(cwd == page_dir for _, cwd in fake_git.calls)

    def test_arguments_are_discrete(self, page_dir, fake_git):
        vcs = GitVersionControl(
            git_binary="/usr/bin/git",
            author_name="Wiki Bot",
            author_email="bot@example.org",
            runner=fake_git,
        )
        vcs.on_content_changed(page_dir, "content.md")

        first = fake_git.argvs[0]
        assert first[:5] == [
            "/usr/bin/git",
            "-c",
            "user.name=Wiki Bot",
            "-c",
            "user.email=bot@example.org",
        ]
        add_args = fake_git.calls[1][0]
        assert add_args == ["add", "--", "content.md"]
        commit_args = fake_git.calls[2][0]
        assert commit_args[-2:] == ["-m", INITIAL_MESSAGE]
        assert "--allow-empty" in commit_args

    def test_commit_failure_is_absorbed(self, page_dir):
        fake_git = FakeGit(fail_on=("commit",))
        vcs = GitVersionControl(runner=fake_git)
        assert vcs.on_content_changed(page_dir, "content.md") is False
        # The update commit is still attempted after the initial one fails.
        assert [args[0] for args, _ in fake_git.calls].count("add") == 2

    def test_init_failure_stops_before_committing(self, page_dir):
        fake_git = FakeGit(fail_on=("init",))
        vcs = GitVersionControl(runner=fake_git)
        assert vcs.on_content_changed(page_dir, "content.md") is False
        assert [args[0] for args, _ in fake_git.calls] == ["init"]

    def test_snapshot_count_without_history(self, page_dir, fake_git):
        assert GitVersionControl(runner=fake_git).snapshot_count(page_dir) == 0
        assert fake_git.calls == []


class TestBuildVersionControl:
    def test_git_by_default(self):
        vcs = build_version_control(Settings(_env_file=None))
        assert isinstance(vcs, GitVersionControl)

    def test_disabled(self, page_dir):
        vcs = build_version_control(Settings(_env_file=None, git_binary=""))
        assert isinstance(vcs, NullVersionControl)
        assert vcs.on_content_changed(page_dir, "content.md") is False


# ============================================================
# Real git
# ============================================================


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestRealGit:
    @pytest.fixture
    def vcs(self):
        return GitVersionControl(timeout=30)

    @pytest.fixture
    def store(self, tmp_path, vcs):
        return PageStore(tmp_path / "db", vcs=vcs)

    def test_first_write_gives_two_snapshots(self, store, vcs):
        result = store.write("Main", "hello")
        assert result.created
        assert result.versioned
        assert vcs.snapshot_count(store.content_path("Main").parent) == 2

    def test_each_write_adds_one_snapshot(self, store, vcs):
        store.write("Main", "one")
        store.write("Main", "two")
        store.write("Main", "two")
        assert vcs.snapshot_count(store.content_path("Main").parent) == 4

    def test_commit_messages(self, store, vcs):
        store.write("Main", "one")
        directory = store.content_path("Main").parent
        log = vcs._git(directory, "log", "--format=%s")
        assert log.stdout.split("\n")[:2] == [UPDATE_MESSAGE, INITIAL_MESSAGE]

    def test_history_tracks_content(self, store, vcs):
        store.write("Main", "first version")
        store.write("Main", "second version")
        directory = store.content_path("Main").parent
        shown = vcs._git(directory, "show", "HEAD~1:content.md")
        assert shown.stdout == "first version"
