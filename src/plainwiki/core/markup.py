"""Markdown conversion.

Page text is converted to HTML either in-process with Python-Markdown or by
an external converter program that reads a file path and writes HTML to its
standard output. Wiki links are rewritten afterwards by the lexer.
"""

import html
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, Sequence

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor

from plainwiki.config import Settings
from plainwiki.core.process import CommandRunner, run_command

logger = logging.getLogger(__name__)

# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


def create_parser() -> Markdown:
    """Create a Markdown parser with code highlighting and math support.

    Returns:
        Configured Markdown parser instance.
    """
    return Markdown(
        extensions=[
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",
            "codehilite",  # Pygments highlighting for fenced and indented code
            "pymdownx.arithmatex",  # $inline$ and $$block$$ math, left for a client-side renderer
            "pymdownx.tasklist",
            StrikethroughExtension(),
        ],
        extension_configs={
            "codehilite": {"guess_lang": False},
            "pymdownx.arithmatex": {"generic": True},
        },
    )


def fallback_html(text: str) -> str:
    """Escaped preformatted rendering used when conversion fails."""
    return f'<pre class="unconverted">{html.escape(text)}</pre>'


class MarkdownConverter(Protocol):
    """Converts page text to an HTML fragment."""

    def convert(self, path: Path) -> str:
        """Convert the file at path."""
        ...

    def convert_text(self, text: str) -> str:
        """Convert text that is not stored in a file."""
        ...


class PythonMarkdownConverter:
    """In-process conversion with Python-Markdown."""

    def convert(self, path: Path) -> str:
        return self.convert_text(path.read_text(encoding="utf-8"))

    def convert_text(self, text: str) -> str:
        # Markdown instances carry per-document state, so use a fresh one.
        return create_parser().convert(text)


class CommandMarkdownConverter:
    """Conversion through an external program.

    The content path is appended to ``argv``; the program's standard output
    is the HTML. A failing program degrades to an escaped dump of the raw
    text.
    """

    def __init__(
        self,
        argv: Sequence[str],
        timeout: float | None = None,
        runner: CommandRunner = run_command,
    ):
        self.argv = list(argv)
        self.timeout = timeout
        self.runner = runner

    def convert(self, path: Path) -> str:
        result = self.runner([*self.argv, str(path)], timeout=self.timeout)
        if result.ok:
            return result.stdout
        logger.warning("Markdown conversion failed for %s, rendering raw text", path)
        return fallback_html(path.read_text(encoding="utf-8"))

    def convert_text(self, text: str) -> str:
        fd, name = tempfile.mkstemp(suffix=".md")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            return self.convert(Path(name))
        finally:
            os.unlink(name)


def build_converter(settings: Settings) -> MarkdownConverter:
    """Pick the converter configured in settings."""
    if settings.markdown_command:
        return CommandMarkdownConverter(
            settings.markdown_command, timeout=settings.markdown_timeout
        )
    return PythonMarkdownConverter()
