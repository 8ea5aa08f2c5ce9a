# src/taskminder/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    logger.info("Console connector started (owner=%s).", state.service.current_owner_id)
    write(f"[{_ts_local()}] [CONSOLE] Type /help for commands. Use /exit to quit.")

    while True:
        try:
            user_input = read_line(f"{state.service.current_owner_id or '?'}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command (see log)."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."
        write(response)

    logger.info("Console connector finished.")
