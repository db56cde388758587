from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from env import get_logging_env

# Console used by RichHandler. No explicit file: rich resolves sys.stdout at
# write time, so summaries and logs interleave in order.
UI_CONSOLE = Console(soft_wrap=True)


class ConsoleGateFilter(logging.Filter):
    """
    Drop console output entirely when quiet mode is enabled.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return not get_logging_env().quiet


def build_console_handler(level: int = logging.NOTSET) -> logging.Handler:
    handler = RichHandler(
        console=UI_CONSOLE,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)

    # RichHandler renders the level column; the formatter must not repeat it.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter())
    return handler
