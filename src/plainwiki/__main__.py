"""Command line entry point: serve the wiki, set it up, manage users."""

import argparse
import getpass
import logging
import sys
from pathlib import Path

from plainwiki.config import Settings, settings

logger = logging.getLogger("plainwiki")

FRONT_PAGE = "main"
FRONT_PAGE_CONTENT = """# Welcome

This is the front page of your wiki. Edit it to get started.

Links look like [[The Sandbox]] or [[The Sandbox|this]].
"""


def cmd_serve(args: argparse.Namespace, config: Settings) -> int:
    import uvicorn

    from plainwiki.main import create_app

    uvicorn.run(
        create_app(config),
        host=args.host or config.host,
        port=args.port or config.port,
        ssl_certfile=str(config.ssl_certfile) if config.ssl_certfile else None,
        ssl_keyfile=str(config.ssl_keyfile) if config.ssl_keyfile else None,
        log_level="debug" if config.debug else "info",
    )
    return 0


def cmd_init(args: argparse.Namespace, config: Settings) -> int:
    from plainwiki.core.storage import PageStore
    from plainwiki.core.vcs import build_version_control

    config.data_dir.mkdir(parents=True, exist_ok=True)
    config.docroot.mkdir(parents=True, exist_ok=True)
    store = PageStore(
        config.data_dir,
        vcs=build_version_control(config),
        content_filename=config.content_filename,
    )
    if store.seed(FRONT_PAGE, FRONT_PAGE_CONTENT) is None:
        logger.info("Front page already exists in %s", config.data_dir)
    else:
        logger.info("Created front page in %s", config.data_dir)
    return 0


def cmd_passwd(args: argparse.Namespace, config: Settings) -> int:
    from plainwiki.core.auth import HtpasswdFile

    path = args.file or config.passwd_file or Path("passwd")
    password = getpass.getpass(f"Password for {args.username}: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1
    added = HtpasswdFile(path).set_password(args.username, password)
    logger.info("%s user %s in %s", "Added" if added else "Updated", args.username, path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plainwiki", description="Plain text wiki server")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    init = sub.add_parser("init", help="Create the page and static directories")
    init.set_defaults(func=cmd_init)

    passwd = sub.add_parser("passwd", help="Add a user or change a password")
    passwd.add_argument("username")
    passwd.add_argument("--file", type=Path, default=None, help="Credential store to write")
    passwd.set_defaults(func=cmd_passwd)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
