"""PlainWiki FastAPI application."""

import logging
import mimetypes
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from plainwiki.config import Settings, settings
from plainwiki.core.auth import Authenticator, HtpasswdFile
from plainwiki.core.errors import MalformedRequest, PageNotFound, UnhandledService, WikiError
from plainwiki.core.markup import build_converter
from plainwiki.core.models import Route
from plainwiki.core.pipeline import ContentPipeline, RenderedPage
from plainwiki.core.router import parse_path, resolve
from plainwiki.core.static import StaticFileService
from plainwiki.core.storage import PageStore
from plainwiki.core.vcs import build_version_control

logger = logging.getLogger(__name__)

templates_path = Path(__file__).parent / "templates"

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

CREATED_MESSAGE = "Page created."
EDITED_MESSAGE = "Page edited."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: load the MIME table once and log the setup."""
    mimetypes.init()
    config: Settings = app.state.settings
    logger.info(
        "Serving pages from %s, static files from %s, authentication %s",
        config.data_dir,
        config.docroot,
        "enabled" if config.auth_enabled else "disabled",
    )
    yield


def _html(rendered: RenderedPage) -> HTMLResponse:
    return HTMLResponse(rendered.body, status_code=rendered.status_code)


async def read_content(request: Request) -> str:
    """Get the ``content`` field of a form-encoded request body."""
    form = await request.form()
    content = form.get("content")
    if not isinstance(content, str):
        raise MalformedRequest("Form field 'content' is missing")
    return content


async def view_page(request: Request, name: str) -> HTMLResponse:
    """View a wiki page."""
    pipeline: ContentPipeline = request.app.state.pipeline
    rendered = await run_in_threadpool(pipeline.render, name)
    return _html(rendered)


async def save_page(request: Request, name: str) -> HTMLResponse:
    """Save page content, then show the page."""
    storage: PageStore = request.app.state.storage
    pipeline: ContentPipeline = request.app.state.pipeline
    content = await read_content(request)
    result = await run_in_threadpool(storage.write, name, content)
    message = CREATED_MESSAGE if result.created else EDITED_MESSAGE
    rendered = await run_in_threadpool(pipeline.render, name, message)
    return _html(rendered)


async def edit_page(request: Request, name: str) -> HTMLResponse:
    """Edit page form."""
    pipeline: ContentPipeline = request.app.state.pipeline
    rendered = await run_in_threadpool(pipeline.render_edit, name)
    return _html(rendered)


async def dispatch(request: Request, path: str) -> Response:
    """Route every request through the path state machine."""
    parsed = parse_path("/" + path, request.method)
    route = resolve(parsed)
    logger.debug("%s /%s -> %s", request.method, path, route.value)

    if route is Route.VIEW:
        return await view_page(request, parsed.segments[0])
    if route is Route.PUT:
        return await save_page(request, parsed.segments[0])
    if route is Route.EDIT:
        return await edit_page(request, parsed.segments[0])
    if route is Route.FILE:
        static: StaticFileService = request.app.state.static
        return static.serve(parsed.segments)
    if route is Route.UNHANDLED_SERVICE:
        raise UnhandledService(f"Unhandled service {parsed.service!r}")
    raise PageNotFound(f"No such page: /{path}")


async def wiki_error_handler(request: Request, exc: WikiError) -> HTMLResponse:
    """Render wiki errors as HTML documents."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    pipeline: ContentPipeline = request.app.state.pipeline
    return _html(pipeline.render_error(exc.status_code, str(exc)))


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the application and its components from settings."""
    config = config or settings

    storage = PageStore(
        config.data_dir,
        vcs=build_version_control(config),
        content_filename=config.content_filename,
    )
    templates = Jinja2Templates(directory=str(templates_path))
    pipeline = ContentPipeline(
        storage, build_converter(config), templates, app_title=config.app_title
    )
    store = HtpasswdFile(config.passwd_file) if config.passwd_file else None
    authenticator = Authenticator(store, realm=config.auth_realm)

    app = FastAPI(
        title=config.app_title,
        debug=config.debug,
        lifespan=lifespan,
        dependencies=[Depends(authenticator.dependency())] if authenticator.enabled else None,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = config
    app.state.storage = storage
    app.state.pipeline = pipeline
    app.state.static = StaticFileService(config.docroot)

    app.add_exception_handler(WikiError, wiki_error_handler)
    app.add_api_route(
        "/{path:path}",
        dispatch,
        methods=ALL_METHODS,
        response_class=HTMLResponse,
        include_in_schema=False,
    )
    return app


app = create_app()
