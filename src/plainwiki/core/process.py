"""External process invocation.

Commands are always run from a discrete argv list, never through a shell.
Failures to start, non-zero exits and timeouts are returned as a failed
CommandResult and logged; they never raise.
"""

import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from plainwiki.core.models import CommandResult

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Callable that runs an argv list and reports the outcome."""

    def __call__(
        self,
        argv: Sequence[str],
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult: ...


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def run_command(
    argv: Sequence[str],
    cwd: Path | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run an external command and capture its output.

    Args:
        argv: Program and arguments, one entry per argument.
        cwd: Working directory for the process.
        timeout: Seconds before the process is killed.

    Returns:
        CommandResult; ``returncode`` is -1 when the process could not be
        started or was killed after the timeout.
    """
    args = [str(arg) for arg in argv]
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("Command timed out after %ss: %s", timeout, args)
        return CommandResult(
            argv=args,
            returncode=-1,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
        )
    except OSError as e:
        logger.warning("Could not run %s: %s", args[0], e)
        return CommandResult(argv=args, returncode=-1, stderr=str(e))

    result = CommandResult(
        argv=args,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
    )
    if not result.ok:
        logger.warning(
            "Command %s exited with status %d: %s",
            args,
            result.returncode,
            result.stderr.strip(),
        )
    elif result.stderr.strip():
        logger.info("Command %s wrote to stderr: %s", args, result.stderr.strip())
    return result
