"""Logging setup for the CLI.

Log records go through rich on the same console as the CLI output, so log
lines and status spinners do not overwrite each other.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from rsmigrate.cli.common.output import console

_NOISY_LOGGERS = ("botocore", "boto3", "urllib3")


def configure_logging(verbose: bool = False) -> None:
    """Route `rsmigrate` logs to the rich console (DEBUG with --verbose)."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(
        console=console,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
