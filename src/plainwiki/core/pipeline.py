"""Page rendering: raw text -> Markdown -> wiki links -> HTML document."""

from dataclasses import dataclass, field
from typing import Any

from fastapi.templating import Jinja2Templates

from plainwiki.core.lexer import transform
from plainwiki.core.markup import MarkdownConverter
from plainwiki.core.storage import Storage

PLACEHOLDER_CONTENT = "This page is empty. Edit it to add content."


@dataclass
class RenderedPage:
    """A rendered HTML document and the status it should be served with."""

    body: str
    status_code: int = 200
    context: dict[str, Any] = field(default_factory=dict)


class ContentPipeline:
    """Turns stored pages into HTML documents.

    Rendering is stateless: the same stored text and message always give the
    same document.
    """

    def __init__(
        self,
        storage: Storage,
        converter: MarkdownConverter,
        templates: Jinja2Templates,
        app_title: str = "PlainWiki",
    ):
        self.storage = storage
        self.converter = converter
        self.templates = templates
        self.app_title = app_title

    def _render(self, template: str, status_code: int = 200, **context: Any) -> RenderedPage:
        context = {"app_title": self.app_title, **context}
        body = self.templates.get_template(template).render(context)
        return RenderedPage(body=body, status_code=status_code, context=context)

    def render_fragment(self, text: str) -> str:
        """Convert page text to an HTML fragment with wiki links resolved."""
        return transform(self.converter.convert_text(text))

    def render(self, page_name: str, message: str | None = None) -> RenderedPage:
        """Render a page for viewing.

        Args:
            page_name: Page name as it appears in the URL.
            message: One-shot status line such as "Page created.".

        Returns:
            The page document, or a 404 "does not exist" document that offers
            a form creating the page.
        """
        slug = self.storage.slug_for(page_name)
        if not self.storage.exists(page_name):
            return self._render(
                "page/missing.html",
                status_code=404,
                page_name=page_name,
                slug=slug,
                placeholder=PLACEHOLDER_CONTENT,
            )

        path = self.storage.content_path(page_name)
        html_content = transform(self.converter.convert(path))
        return self._render(
            "page/view.html",
            page_name=page_name,
            slug=slug,
            html_content=html_content,
            edit_url=f"/wiki/{slug}/edit",
            message=message,
        )

    def render_edit(self, page_name: str) -> RenderedPage:
        """Render the edit form holding a page's raw text.

        Raises:
            PageNotFound: If the page does not exist.
        """
        page = self.storage.read(page_name)
        return self._render(
            "page/edit.html",
            page_name=page_name,
            slug=page.slug,
            raw_content=page.content,
        )

    def render_error(self, status_code: int, message: str) -> RenderedPage:
        """Render an error document."""
        return self._render(
            "error.html", status_code=status_code, status=status_code, message=message
        )
