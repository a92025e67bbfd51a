# src/taskdeck/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the AppContext (which runs the daily reset
sweep), then starts the console loop.
"""

from __future__ import annotations

import logging
import sys

from ..config import get_settings
from ..errors import PersistenceError
from ..logging_setup import setup_logging
from .bootstrap import create_app_context
from .console import run_console_loop

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    file_level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(file_level, int):
        file_level = logging.INFO
    setup_logging(log_dir=settings.data_dir, file_level=file_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        ctx = create_app_context(settings=settings)
    except PersistenceError as e:
        logger.error("Cannot open local store: %s", e)
        print(f"Cannot open local store: {e}", file=sys.stderr)
        return 1

    if settings.console_enabled:
        run_console_loop(ctx)
    else:
        logger.info("Console disabled; nothing else to run.")

    ctx.analytics.close()
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
