#!/usr/bin/env python3
import logging
import sys
from typing import Optional

from .config import Config


def check_dependencies() -> None:
    try:
        import rich
        import prompt_toolkit
        import pyperclip
    except ImportError as error:
        print(f" Required dependency not found: {error}")
        print("Please install required packages:")
        print("pip install rich prompt-toolkit pyperclip")
        sys.exit(1)


def configure_logging() -> None:
    logger = logging.getLogger("wsh")
    if logger.handlers:
        return

    level = getattr(logging, Config.get_log_level(), logging.WARNING)
    try:
        handler: logging.Handler = logging.FileHandler(Config.LOG_FILE, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def build_shell():
    from .commands.executor import ShellCommandExecutor
    from .completion import create_completion_engine
    from .core import Repl, ShellState
    from .ui.manager import UIManager, create_console, create_highlighter

    state = ShellState.create()
    ui = UIManager(create_console())
    executor = ShellCommandExecutor(state, ui)
    repl = Repl(
        state,
        ui,
        executor,
        create_completion_engine(),
        highlighter=create_highlighter(state),
    )
    return state, executor, repl


def main(command: Optional[str] = None) -> int:
    check_dependencies()
    Config.ensure_directories()
    configure_logging()

    state, executor, repl = build_shell()
    if command is not None:
        return executor.execute(command)
    return repl.run()


if __name__ == "__main__":
    sys.exit(main())
