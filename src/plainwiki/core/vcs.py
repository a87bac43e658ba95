"""Page versioning through git.

Each page directory holds its own repository. Every content change is
recorded as a commit; the first write also gets an initial commit, so a page
written N times has at least N snapshots.
"""

import logging
from pathlib import Path
from typing import Protocol

from plainwiki.config import Settings
from plainwiki.core.models import CommandResult
from plainwiki.core.process import CommandRunner, run_command

logger = logging.getLogger(__name__)

INITIAL_MESSAGE = "Initial commit."
UPDATE_MESSAGE = "Updated page."


class VersionControl(Protocol):
    """Records snapshots of a page's content file."""

    def on_content_changed(self, directory: Path, filename: str) -> bool:
        """Record a snapshot. Returns False when versioning failed."""
        ...


class NullVersionControl:
    """Used when versioning is switched off."""

    def on_content_changed(self, directory: Path, filename: str) -> bool:
        logger.debug("Versioning disabled, not recording %s", directory)
        return False


class GitVersionControl:
    """Drives the git binary with one repository per page directory."""

    def __init__(
        self,
        git_binary: str = "git",
        author_name: str = "wiki",
        author_email: str = "wiki@localhost",
        timeout: float | None = 30.0,
        runner: CommandRunner = run_command,
    ):
        self.git_binary = git_binary
        self.author_name = author_name
        self.author_email = author_email
        self.timeout = timeout
        self.runner = runner

    def _git(self, directory: Path, *args: str) -> CommandResult:
        argv = [
            self.git_binary,
            "-c", f"user.name={self.author_name}",
            "-c", f"user.email={self.author_email}",
            "-c", "commit.gpgsign=false",
            *args,
        ]
        return self.runner(argv, cwd=directory, timeout=self.timeout)

    def has_history(self, directory: Path) -> bool:
        """Check if the page directory already has a repository."""
        return (directory / ".git").exists()

    def init(self, directory: Path) -> bool:
        """Create an empty repository in the page directory."""
        result = self._git(directory, "init", "--quiet")
        if result.ok:
            logger.info("Initialized page history in %s", directory)
        return result.ok

    def commit(self, directory: Path, filename: str, message: str) -> bool:
        """Stage the content file and record one snapshot.

        Empty commits are allowed so that every call adds exactly one
        snapshot, even when the content did not change.
        """
        added = self._git(directory, "add", "--", filename)
        if not added.ok:
            return False
        committed = self._git(
            directory, "commit", "--quiet", "--allow-empty", "-m", message
        )
        return committed.ok

    def on_content_changed(self, directory: Path, filename: str) -> bool:
        """Record the new content of a page.

        Returns:
            True when every git invocation succeeded.
        """
        ok = True
        if not self.has_history(directory):
            # Never fall through to a repository further up the tree.
            if not self.init(directory):
                logger.warning("Versioning degraded for %s", directory)
                return False
            ok = self.commit(directory, filename, INITIAL_MESSAGE)
        ok = self.commit(directory, filename, UPDATE_MESSAGE) and ok
        if not ok:
            logger.warning("Versioning degraded for %s", directory)
        return ok

    def snapshot_count(self, directory: Path) -> int:
        """Number of commits in the page's history, 0 without history."""
        if not self.has_history(directory):
            return 0
        result = self._git(directory, "rev-list", "--count", "HEAD")
        if not result.ok:
            return 0
        return int(result.stdout.strip() or 0)


def build_version_control(settings: Settings) -> VersionControl:
    """Pick the version control configured in settings."""
    if not settings.git_binary:
        return NullVersionControl()
    return GitVersionControl(
        git_binary=settings.git_binary,
        author_name=settings.git_author_name,
        author_email=settings.git_author_email,
        timeout=settings.git_timeout,
    )
