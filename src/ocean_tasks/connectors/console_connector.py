# src/ocean_tasks/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..cli.commands import render_view
from ..core.state import AppState

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def run_console_loop(state: AppState, *, read: InputFn = input, write: OutputFn = print) -> None:
    """
    Interactive REPL.

    Plain text becomes the draft and is submitted as a new task; lines that
    start with "/" are dispatched to the command registry.
    """
    logger.info("Console connector started (theme=%s).", state.theme.value)
    write("Type a task to add it. Use /help for commands. Use /exit to quit.\n")
    write(render_view(state))

    while True:
        try:
            user_input = read("> ").strip()
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
            reply = command_registry.handle(state, user_input, emit=write)
            if reply is None:
                state.session.set_draft(user_input)
                state.session.submit_draft()
                reply = render_view(state)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        write(reply)

    logger.info("Console connector finished.")
