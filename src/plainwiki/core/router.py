"""Request path dispatch.

A request path is split into ``(service, segments)`` and mapped to a
handler. Authentication runs before this, as a dependency on the app.

    /wiki/<page>        GET -> view, POST -> put
    /wiki/<page>/edit   GET -> edit
    /file/<path...>     GET -> static file
    /<other>/...        unhandled service
"""

from plainwiki.core.models import ParsedRequest, Route

WIKI_SERVICE = "wiki"
FILE_SERVICE = "file"
EDIT_ACTION = "edit"

READ_METHODS = frozenset({"GET", "HEAD"})


def parse_path(path: str, method: str = "GET") -> ParsedRequest:
    """Split a decoded request path into service and segments.

    A single trailing empty segment (from a trailing slash) is dropped.
    """
    parts = path.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]
    if len(parts) > 1 and parts[-1] == "":
        parts = parts[:-1]
    service = parts[0] if parts else ""
    return ParsedRequest(
        service=service,
        segments=tuple(parts[1:]),
        method=method.upper(),
    )


def resolve(request: ParsedRequest) -> Route:
    """Pick the handler for a parsed request."""
    method = request.method
    segments = request.segments

    if request.service == FILE_SERVICE:
        if segments and method in READ_METHODS:
            return Route.FILE
        return Route.NOT_FOUND

    if request.service == WIKI_SERVICE:
        if len(segments) == 1 and segments[0]:
            if method in READ_METHODS:
                return Route.VIEW
            if method == "POST":
                return Route.PUT
        elif len(segments) == 2 and segments[1] == EDIT_ACTION and method in READ_METHODS:
            return Route.EDIT
        return Route.NOT_FOUND

    return Route.UNHANDLED_SERVICE
