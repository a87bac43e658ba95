"""Storage abstraction for wiki pages."""

import contextlib
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from plainwiki.core.errors import InvalidPageName, PageNotFound, StorageError
from plainwiki.core.lexer import wikify_target
from plainwiki.core.models import Page, WriteResult
from plainwiki.core.vcs import NullVersionControl, VersionControl

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Abstract base class for page storage."""

    @abstractmethod
    def slug_for(self, name: str) -> str:
        """Sanitized slug of a page name."""
        ...

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a page exists."""
        ...

    @abstractmethod
    def content_path(self, name: str) -> Path:
        """Filesystem location of a page's raw text."""
        ...

    @abstractmethod
    def read(self, name: str) -> Page:
        """Get a page by name. Raises PageNotFound if it does not exist."""
        ...

    @abstractmethod
    def write(self, name: str, content: str) -> WriteResult:
        """Replace a page's content, creating the page if needed."""
        ...


class PageStore(Storage):
    """File-based storage implementation.

    Each page lives in its own directory named after its slug:
    ``<base_path>/<slug>/content.md``. The directory also holds the page's
    history, which only the version control collaborator touches.
    """

    def __init__(
        self,
        base_path: Path,
        vcs: VersionControl | None = None,
        content_filename: str = "content.md",
    ):
        self.base_path = base_path
        self.vcs = vcs or NullVersionControl()
        self.content_filename = content_filename

    def slug_for(self, name: str) -> str:
        slug = wikify_target(name)
        if not slug:
            raise InvalidPageName(f"Page name {name!r} is empty")
        return slug

    def _get_dir(self, name: str) -> Path:
        """Get the directory for a page."""
        return self.base_path / self.slug_for(name)

    def content_path(self, name: str) -> Path:
        return self._get_dir(name) / self.content_filename

    def exists(self, name: str) -> bool:
        return self.content_path(name).is_file()

    def read(self, name: str) -> Page:
        path = self.content_path(name)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise PageNotFound(f"Page {name!r} does not exist") from None
        return Page(name=name, slug=path.parent.name, content=content)

    def write(self, name: str, content: str) -> WriteResult:
        """Save a page and record the change in its history.

        The content file is replaced atomically before versioning starts, so
        a reader sees either the old or the new text and a failing version
        control step never loses the write.

        Raises:
            StorageError: If the directory or content file cannot be written.
        """
        directory = self._get_dir(name)
        path = directory / self.content_filename
        content = content.replace("\r\n", "\n")

        created = not path.exists()
        made_dir = False
        try:
            if not directory.is_dir():
                directory.mkdir(parents=True)
                made_dir = True
            self._replace(path, content)
        except OSError as e:
            if made_dir:
                shutil.rmtree(directory, ignore_errors=True)
            logger.error("Could not write page %s: %s", directory.name, e)
            raise StorageError(f"Could not write page {name!r}") from e

        logger.info("%s page %s", "Created" if created else "Edited", directory.name)

        try:
            versioned = self.vcs.on_content_changed(directory, self.content_filename)
        except Exception:
            logger.exception("Versioning failed for page %s", directory.name)
            versioned = False

        page = Page(name=name, slug=directory.name, content=content)
        return WriteResult(page=page, created=created, versioned=versioned)

    def _replace(self, path: Path, content: str) -> None:
        """Write content to a temporary file beside path, then rename it over."""
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def seed(self, name: str, content: str) -> WriteResult | None:
        """Create a page unless it already exists."""
        if self.exists(name):
            return None
        return self.write(name, content)
