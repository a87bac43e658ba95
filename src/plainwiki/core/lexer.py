"""Wiki link lexer.

Scans text left to right for ``[[target]]`` and ``[[target|text]]`` tokens
and rewrites them into anchors pointing at ``/wiki/<slug>``. Everything
outside a token is passed through untouched; no HTML escaping happens here.
"""

import html
import re
from typing import Iterator

from plainwiki.core.models import WikiLink

LINK_OPEN = "[["
LINK_CLOSE = "]]"
LINK_SEPARATOR = "|"

NON_WORD_RUN = re.compile(r"\W+")


def wikify_target(target: str) -> str:
    """Convert a link target or page name into its slug.

    The slug is used both as the page directory name and as the URL path
    segment, so the two always agree.

    Args:
        target: Page name as typed by the user.

    Returns:
        Lower-cased target with every run of non-word characters replaced
        by a single hyphen.
    """
    return NON_WORD_RUN.sub("-", target.lower())


def page_url(target: str) -> str:
    """URL of the page a target refers to."""
    return f"/wiki/{wikify_target(target)}"


def parse_link(inner: str) -> WikiLink:
    """Build a WikiLink from the text between ``[[`` and ``]]``.

    Only the first ``|`` separates target from display text; any further
    pipes are kept in the display text. The target may arrive HTML-escaped
    from the Markdown converter, so it is unescaped before slugging to match
    the slug the store uses for the same page name.
    """
    target, separator, text = inner.partition(LINK_SEPARATOR)
    display_text = text if separator and text else target
    href = page_url(html.unescape(target))
    return WikiLink(target=target, display_text=display_text, href=href)


def tokenize(text: str) -> Iterator[str | WikiLink]:
    """Split text into literal runs and wiki links.

    The generator is finite and can be restarted by calling it again. An
    opening ``[[`` without a matching ``]]`` is yielded as literal text.
    """
    pos = 0
    length = len(text)
    while pos < length:
        start = text.find(LINK_OPEN, pos)
        if start == -1:
            yield text[pos:]
            return
        end = text.find(LINK_CLOSE, start + len(LINK_OPEN))
        if end == -1:
            yield text[pos:]
            return
        if start > pos:
            yield text[pos:start]
        yield parse_link(text[start + len(LINK_OPEN) : end])
        pos = end + len(LINK_CLOSE)


def render_link(link: WikiLink) -> str:
    """Render a WikiLink as an HTML anchor."""
    return f'<a href="{link.href}">{link.display_text}</a>'


def transform(text: str | bytes) -> str:
    """Rewrite all wiki links in text into HTML anchors.

    Args:
        text: Page text or an HTML fragment. Bytes are decoded as UTF-8.

    Returns:
        The text with every complete ``[[...]]`` token replaced.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return "".join(
        render_link(token) if isinstance(token, WikiLink) else token
        for token in tokenize(text)
    )
