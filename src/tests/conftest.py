"""Shared fixtures and fakes for the test suite."""

from pathlib import Path

import pytest

from plainwiki.core.models import CommandResult


class FakeVersionControl:
    """Records content-change notifications instead of running git."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[Path, str]] = []

    def on_content_changed(self, directory: Path, filename: str) -> bool:
        self.calls.append((directory, filename))
        if self.error is not None:
            raise self.error
        return self.result


class FakeGit:
    """Command runner standing in for the git binary.

    Strips the leading ``git -c ... -c ... -c ...`` and records the git
    subcommand with its arguments. ``init`` creates a ``.git`` directory so
    history detection works.
    """

    PREFIX_LEN = 7

    def __init__(self, fail_on: tuple[str, ...] = ()):
        self.fail_on = fail_on
        self.calls: list[tuple[list[str], Path | None]] = []
        self.argvs: list[list[str]] = []

    def __call__(self, argv, cwd=None, timeout=None) -> CommandResult:
        argv = list(argv)
        args = argv[self.PREFIX_LEN :]
        self.argvs.append(argv)
        self.calls.append((args, cwd))
        if args[0] in self.fail_on:
            return CommandResult(argv=argv, returncode=1, stderr="fatal: simulated")
        if args[0] == "init" and cwd is not None:
            (Path(cwd) / ".git").mkdir()
        return CommandResult(argv=argv, returncode=0)

    def commit_messages(self) -> list[str]:
        return [args[args.index("-m") + 1] for args, _ in self.calls if args[0] == "commit"]


@pytest.fixture
def fake_vcs():
    return FakeVersionControl()


@pytest.fixture
def fake_git():
    return FakeGit()
