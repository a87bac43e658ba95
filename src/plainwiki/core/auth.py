"""HTTP Basic authentication against an htpasswd-style credential store.

The store holds one ``username:{SHA1}<base64 digest>`` record per line, the
format written by ``htpasswd -s``. It is re-read on every request.
"""

import base64
import hashlib
import logging
import secrets
from pathlib import Path
from typing import Iterable, Iterator, Protocol

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from plainwiki.core.models import Credential

logger = logging.getLogger(__name__)

SHA1_PREFIX = "{SHA1}"


def hash_password(password: str) -> str:
    """Hash a password the way ``htpasswd -s`` does."""
    digest = hashlib.sha1(password.encode("utf-8")).digest()
    return SHA1_PREFIX + base64.b64encode(digest).decode("ascii")


class CredentialStore(Protocol):
    """Source of credential records."""

    def records(self) -> Iterable[Credential]: ...


class HtpasswdFile:
    """Credential store backed by an htpasswd file."""

    def __init__(self, path: Path):
        self.path = path

    def records(self) -> Iterator[Credential]:
        """Yield the records in the file, skipping blank and malformed lines.

        An unreadable file yields nothing, so nobody authenticates.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read credential store %s: %s", self.path, e)
            return
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            username, separator, password_hash = line.partition(":")
            if not separator or not username:
                logger.warning("Skipping malformed line %d in %s", lineno, self.path)
                continue
            yield Credential(username=username, password_hash=password_hash)

    def set_password(self, username: str, password: str) -> bool:
        """Add a user or replace their password.

        Returns:
            True if the user was added, False if an existing record was replaced.
        """
        if ":" in username:
            raise ValueError("username must not contain ':'")
        new_line = f"{username}:{hash_password(password)}"
        lines = []
        added = True
        if self.path.exists():
            for line in self.path.read_text(encoding="utf-8").splitlines():
                if line.partition(":")[0] == username:
                    line = new_line
                    added = False
                lines.append(line)
        if added:
            lines.append(new_line)
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return added


def check_credentials(store: CredentialStore, username: str, password: str) -> bool:
    """Return True if any record matches both username and password."""
    supplied_user = username.encode("utf-8")
    supplied_hash = hash_password(password).encode("utf-8")
    for record in store.records():
        if secrets.compare_digest(
            record.username.encode("utf-8"), supplied_user
        ) and secrets.compare_digest(record.password_hash.encode("utf-8"), supplied_hash):
            return True
    return False


class Authenticator:
    """Gate for incoming requests.

    With no store configured the gate is disabled and every request passes.
    An instance is usable as a FastAPI dependency.
    """

    def __init__(self, store: CredentialStore | None = None, realm: str = "wiki"):
        self.store = store
        self.realm = realm
        self.security = HTTPBasic(realm=realm, auto_error=False)

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def is_authenticated(self, credentials: HTTPBasicCredentials | None) -> bool:
        """Check request credentials; missing credentials fail when enabled."""
        if self.store is None:
            return True
        if credentials is None:
            return False
        return check_credentials(self.store, credentials.username, credentials.password)

    def challenge(self) -> HTTPException:
        """401 response asking the client for Basic credentials."""
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": f'Basic realm="{self.realm}"'},
        )

    def dependency(self):
        """Build the FastAPI dependency enforcing this gate."""
        security = self.security

        # Sync so the credential file is read in the threadpool.
        def require_user(
            credentials: HTTPBasicCredentials | None = Depends(security),
        ) -> str | None:
            if not self.is_authenticated(credentials):
                if credentials is not None:
                    logger.info("Rejected credentials for user %r", credentials.username)
                raise self.challenge()
            return credentials.username if credentials else None

        return require_user
