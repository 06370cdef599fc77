"""Coloured console logging with a fixed column layout."""

from __future__ import annotations

import enum
import inspect
import os
from dataclasses import dataclass

_RESET = "\x1b[0m"
_CALLER_STYLE = "\x1b[38;2;120;120;120m"


class LogLevel(enum.Enum):
    """Severity of a log line; the value is the level's rank."""

    DEV = 9
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def style(self) -> str:
        return _STYLES[self]

    def __str__(self) -> str:
        return self.label


_LABELS = {
    LogLevel.DEV: "DEV",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARN",
    LogLevel.ERROR: "ERROR",
}

# Bold foreground colours: magenta, green, blue, yellow, red.
_STYLES = {
    LogLevel.DEV: "\x1b[1;35m",
    LogLevel.DEBUG: "\x1b[1;32m",
    LogLevel.INFO: "\x1b[1;34m",
    LogLevel.WARNING: "\x1b[1;33m",
    LogLevel.ERROR: "\x1b[1;31m",
}


@dataclass(frozen=True)
class Logger:
    """Writes one line per message at a fixed level."""

    level: LogLevel
    color: bool = True

    def format(self, message: object, caller: str) -> str:
        """Build the line that :meth:`log` prints."""
        caller_text = f"{caller:<30}"
        level_text = f"{self.level.label:<6}"
        if self.color:
            caller_text = f"{_CALLER_STYLE}{caller_text}{_RESET}"
            level_text = f"{self.level.style}{level_text}{_RESET}"
        return f"[{caller_text}] {level_text}: {message}"

    def log(self, message: object, caller: str) -> None:
        print(self.format(message, caller))


def _caller_file() -> str:
    # stack: _caller_file, _log, log_<level>, caller
    filename = inspect.stack(0)[3].filename
    try:
        return os.path.relpath(filename)
    except ValueError:
        return filename


def _log(level: LogLevel, message: object) -> None:
    Logger(level).log(message, _caller_file())


def log_debug(message: object) -> None:
    _log(LogLevel.DEBUG, message)


def log_info(message: object) -> None:
    _log(LogLevel.INFO, message)


def log_warning(message: object) -> None:
    _log(LogLevel.WARNING, message)


def log_error(message: object) -> None:
    _log(LogLevel.ERROR, message)