"""
Console and file logging for parquetstudio.

Every component asks for a logger named `parquetstudio.<component>`. Lines
are tagged with the component, colored on the terminal and written without
color to logs/parquetstudio.log in the working directory.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init

init()

PACKAGE = "parquetstudio"
LOG_DIR = "logs"
LOG_FILE = f"{PACKAGE}.log"

# Message highlight per color_prefix
HIGHLIGHTS = {
    "START": Fore.CYAN,
    "OK": Fore.GREEN,
    "WARN": Fore.YELLOW,
}


class ComponentFormatter(logging.Formatter):
    """Adds a `component` field; optionally colors it and the message."""

    def __init__(self, fmt: str, colored: bool):
        super().__init__(fmt, datefmt="%H:%M:%S")
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        prefix = f"{PACKAGE}."
        tag = record.name[len(prefix):] if record.name.startswith(prefix) else ""
        if not tag:
            record.component = ""
        elif self.colored:
            record.component = f"{Fore.WHITE}[{tag}]{Style.RESET_ALL} "
        else:
            record.component = f"[{tag}] "

        highlight = HIGHLIGHTS.get(getattr(record, "color_prefix", None), "")
        if not (self.colored and highlight):
            return super().format(record)

        # Records are shared between handlers; color only this rendering
        original = record.msg
        record.msg = f"{highlight}{original}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.msg = original


class StudioLogger:
    """
    Thin wrapper over a standard library logger.

    Handlers are attached the first time a name is requested and the
    logger stops propagating, so repeated get_logger() calls are cheap and
    never duplicate output.
    """

    LOAD_TEMPLATE = "Loaded {:,} rows x {:,} columns in {:.2f}s"
    SAVE_TEMPLATE = "Wrote {:,} rows x {:,} columns in {:.2f}s"

    _level: int = logging.INFO

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            self._attach_handlers()

    def _attach_handlers(self) -> None:
        self.logger.setLevel(StudioLogger._level)
        self.logger.addHandler(self._file_handler())
        self.logger.addHandler(self._console_handler())
        self.logger.propagate = False

    @staticmethod
    def _file_handler() -> logging.Handler:
        directory = Path.cwd() / LOG_DIR
        directory.mkdir(exist_ok=True)
        handler = logging.FileHandler(directory / LOG_FILE, encoding="utf-8")
        handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s  %(levelname)-7s %(component)s%(message)s",
                colored=False,
            )
        )
        return handler

    @staticmethod
    def _console_handler() -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            ComponentFormatter("%(asctime)s  %(component)s%(message)s", colored=True)
        )
        return handler

    def info(self, msg: str, color_prefix: Optional[str] = None) -> None:
        self.logger.info(msg, extra={"color_prefix": color_prefix})

    def start(self, msg: str) -> None:
        self.info(f"START {msg}", color_prefix="START")

    def success(self, msg: str) -> None:
        self.info(f"OK {msg}", color_prefix="OK")

    def warning(self, msg: str) -> None:
        self.logger.warning(msg, extra={"color_prefix": "WARN"})

    def error(self, msg: str) -> None:
        self.logger.error(msg)

    def debug(self, msg: str) -> None:
        self.logger.debug(msg)


def get_logger(name: str) -> StudioLogger:
    return StudioLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """
    Change the level of every parquetstudio logger, including ones created
    later.

    Args:
        level: Level name such as "DEBUG" (any case) or a logging constant

    Raises:
        ValueError: If the name is not a logging level
    """
    if isinstance(level, str):
        number = logging.getLevelName(level.upper())
        if not isinstance(number, int):
            raise ValueError(f"Unknown log level: {level}")
        level = number

    StudioLogger._level = level
    for name, existing in logging.root.manager.loggerDict.items():
        if not isinstance(existing, logging.Logger):
            continue
        if name == PACKAGE or name.startswith(f"{PACKAGE}."):
            existing.setLevel(level)
