"""Static file serving from the document root."""

import mimetypes
from pathlib import Path
from typing import Sequence

from fastapi.responses import FileResponse

from plainwiki.core.errors import PageNotFound

DEFAULT_CONTENT_TYPE = "text/html"


def content_type_for(path: Path) -> str:
    """Look up a content type by extension, falling back to HTML."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or DEFAULT_CONTENT_TYPE


class StaticFileService:
    """Serves files below a root directory."""

    def __init__(self, root: Path):
        self.root = root

    def resolve(self, segments: Sequence[str]) -> Path:
        """Map URL segments to a file below the root.

        Raises:
            PageNotFound: If the file is missing or lies outside the root.
        """
        if not segments or any(s in ("", ".", "..") or "\x00" in s for s in segments):
            raise PageNotFound("/".join(segments))
        root = self.root.resolve()
        path = root.joinpath(*segments).resolve()
        if not path.is_relative_to(root) or not path.is_file():
            raise PageNotFound("/".join(segments))
        return path

    def serve(self, segments: Sequence[str]) -> FileResponse:
        path = self.resolve(segments)
        return FileResponse(path, media_type=content_type_for(path))
