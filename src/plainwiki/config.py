"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Instances are frozen: the settings are read once at startup and passed
    to the components that need them.
    """

    data_dir: Path = Path("db")
    docroot: Path = Path("docroot")
    content_filename: str = "content.md"
    passwd_file: Path | None = None
    auth_realm: str = "wiki"
    app_title: str = "PlainWiki"
    debug: bool = False

    host: str = "127.0.0.1"
    port: int = 8000
    ssl_certfile: Path | None = None
    ssl_keyfile: Path | None = None

    git_binary: str = "git"
    git_author_name: str = "wiki"
    git_author_email: str = "wiki@localhost"
    git_timeout: float = 30.0

    markdown_command: list[str] = []
    markdown_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="PLAINWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    @property
    def auth_enabled(self) -> bool:
        """Authentication is on only when a credential store is configured."""
        return self.passwd_file is not None


settings = Settings()
