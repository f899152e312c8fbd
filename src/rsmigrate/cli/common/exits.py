"""Exit handling for the rsmigrate CLI.

Exit codes:
    0    success, or nothing to do
    1    a remote call or statement failed
    2    invalid options (nothing was sent to the clusters)
    130  interrupted with Ctrl-C (the running statement was cancelled)
"""

from typing import NoReturn

import typer

from rsmigrate.cli.common.output import out
from rsmigrate.core.errors import ConfigError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(EXIT_OK)


def warn_exit(msg: str, code: int = EXIT_OK) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_code_for(exc: BaseException) -> int:
    """Map an exception raised by a command to the process exit code."""
    if isinstance(exc, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    if isinstance(exc, ConfigError):
        return EXIT_USAGE
    return EXIT_FAILURE


def exit_from_exc(exc: BaseException, *, message: str | None = None) -> NoReturn:
    """
    Report `exc` and exit with the code matching its kind, chaining `exc`.

    Args:
        exc: The error that stopped the command.
        message: Text to print instead of `str(exc)`.
    """
    if message is None:
        if isinstance(exc, KeyboardInterrupt):
            message = "Interrupted, the running statement was cancelled"
        else:
            message = str(exc)
    out.error(message)
    raise typer.Exit(exit_code_for(exc)) from exc
