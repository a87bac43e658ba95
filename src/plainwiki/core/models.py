"""Data models for PlainWiki."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Page(BaseModel):
    """Represents a wiki page."""

    name: str
    slug: str
    content: str = ""


class WriteResult(BaseModel):
    """Outcome of a page write."""

    page: Page
    created: bool
    versioned: bool = True


class WikiLink(BaseModel):
    """A parsed ``[[target]]`` or ``[[target|text]]`` token."""

    model_config = ConfigDict(frozen=True)

    target: str
    display_text: str
    href: str


class Credential(BaseModel):
    """One ``username:hash`` record from the credential store."""

    model_config = ConfigDict(frozen=True)

    username: str
    password_hash: str


class CommandResult(BaseModel):
    """Result of an external process invocation."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class Route(str, Enum):
    """Handler selected by the router."""

    VIEW = "view"
    PUT = "put"
    EDIT = "edit"
    FILE = "file"
    UNHANDLED_SERVICE = "unhandled_service"
    NOT_FOUND = "not_found"


class ParsedRequest(BaseModel):
    """A request path split into service and remaining segments."""

    model_config = ConfigDict(frozen=True)

    service: str
    segments: tuple[str, ...] = ()
    method: str = "GET"
