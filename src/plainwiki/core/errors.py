"""Exceptions raised by the wiki core."""


class WikiError(Exception):
    """Base exception for wiki operations."""

    status_code = 500


class PageNotFound(WikiError):
    """Raised when a page or static file does not exist."""

    status_code = 404


class InvalidPageName(WikiError):
    """Raised when a page name sanitizes to an empty slug."""

    status_code = 400


class MalformedRequest(WikiError):
    """Raised when a request body cannot be used, e.g. a missing form field."""

    status_code = 400


class StorageError(WikiError):
    """Raised when page content cannot be written to the filesystem."""

    status_code = 500


class UnhandledService(WikiError):
    """Raised when the first path segment names no known service."""

    status_code = 400
