"""Output configuration: colors and the diagnostics log handler.

Diagnostics go to stderr through a rich log handler, charts go to stdout.
Both honour the same color choice.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

COLOR_CHOICES = ("auto", "yes", "no")

# Root of every logger of the package
_PACKAGE_LOGGER = "lowcharts"


@dataclass(frozen=True)
class OutputConfig:
    """Resolved output settings of a run.

    Attributes:
        color: Whether charts and logs are colored.
        force_terminal: Emit colors even when stdout is not a terminal.
        level: Level of the package logger.
    """

    color: bool
    force_terminal: bool = False
    level: int = logging.INFO

    def console(self, file: TextIO | None = None, stderr: bool = False) -> Console:
        """Console writing with these settings (stdout by default)."""
        return Console(
            file=file,
            stderr=stderr,
            color_system="auto" if self.color else None,
            force_terminal=True if self.force_terminal else None,
            highlight=False,
            soft_wrap=True,
        )


def resolve_color(option: str, stream: TextIO | None = None) -> OutputConfig:
    """Turn a ``--color`` choice into an OutputConfig.

    ``auto`` colors only when stdout is a terminal and TERM is not ``dumb``.

    Raises:
        ValueError: If option is not one of auto, yes or no.
    """
    if option == "yes":
        return OutputConfig(color=True, force_terminal=True)
    if option == "no":
        return OutputConfig(color=False)
    if option == "auto":
        stream = stream or sys.stdout
        if os.environ.get("TERM") == "dumb":
            return OutputConfig(color=False)
        return OutputConfig(color=stream.isatty())
    choices = ", ".join(COLOR_CHOICES)
    raise ValueError(f"color must be one of {choices} (was {option!r})")


def configure_output(
    option: str, verbose: bool, stream: TextIO | None = None
) -> OutputConfig:
    """Set up colors and the package log handler.

    Calling it again replaces the handler installed by a previous call.

    Args:
        option: ``--color`` choice.
        verbose: Log at DEBUG level instead of INFO.
        stream: Stream checked for a terminal with ``auto``. Defaults to stdout.

    Returns:
        The resolved settings, used to build the chart console.
    """
    config = resolve_color(option, stream)
    level = logging.DEBUG if verbose else logging.INFO
    config = OutputConfig(config.color, config.force_terminal, level)

    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=config.console(stderr=True),
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return config
