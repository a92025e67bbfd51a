# src/taskdeck/cli/console.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppContext
from ..errors import PersistenceError, TaskdeckError
from .commands import render_daily, render_tasks
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(ctx: AppContext, *, read_line: Callable[[str], str] = input) -> None:
    """REPL over the slash-command registry. Plain text is added as a task."""
    app_name = str(getattr(ctx.settings, "app_name", "taskdeck"))
    logger.info("Console started.")
    _print_ts(f"[{app_name}] Use /help for commands, /exit to quit.")
    print(render_daily(ctx))
    print(render_tasks(ctx))

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            line = read_line("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not line.startswith("/"):
            line = f"/add {line}"

        try:
            reply = command_registry.handle(ctx, line, emit=emit)
        except PersistenceError as e:
            logger.error("Storage failure while handling %r: %s", line, e)
            reply = f"Could not save: {e}"
        except TaskdeckError as e:
            reply = str(e)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply:
            _print_ts(reply)

    logger.info("Console finished.")
