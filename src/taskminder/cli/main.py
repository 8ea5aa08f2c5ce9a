# src/taskminder/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs a due-date check for the
current owner, then hands over to the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import Settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import TaskManagerError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _startup_checks(state) -> None:
    """Publish overdue / due-soon events once per session."""
    try:
        overdue = state.service.check_overdue_tasks()
        soon = state.service.check_due_soon_tasks()
    except TaskManagerError:
        logger.exception("Startup due-date check failed.")
        return
    if overdue or soon:
        print(f"You have {len(overdue)} overdue task(s) and {len(soon)} due soon. Use /overdue or /soon.")


def main() -> None:
    settings = Settings.from_env()

    # choose console log level from settings.log_level
    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    try:
        _startup_checks(state)
        run_console_loop(state)
    finally:
        state.task_store.close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
