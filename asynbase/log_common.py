"""Shared logging types: levels, timestamps, source locations, events and colours."""

from __future__ import annotations

import functools
import os
import re
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class LogLevel(IntEnum):
    """Log severity; higher is more severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    OFF = 6


_LEVEL_LABELS = {
    LogLevel.TRACE: "TRACE",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO ",
    LogLevel.WARN: "WARN ",
    LogLevel.ERROR: "ERROR",
    LogLevel.FATAL: "FATAL",
}

_LEVELS_BY_NAME = {
    "TRACE": LogLevel.TRACE,
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARN": LogLevel.WARN,
    "ERROR": LogLevel.ERROR,
    "FATAL": LogLevel.FATAL,
    "OFF": LogLevel.OFF,
}


def _as_level(level) -> LogLevel | None:
    try:
        return LogLevel(level)
    except (ValueError, TypeError):
        return None


def log_level_to_string(level) -> str:
    """Return the five-character label of a level, or "?????"."""
    return _LEVEL_LABELS.get(_as_level(level), "?????")


def log_level_from_string(text: str) -> LogLevel:
    """Parse an upper-case level name; anything unknown is INFO."""
    return _LEVELS_BY_NAME.get(text, LogLevel.INFO)


def current_timestamp() -> str:
    """Local time as "YYYY-MM-DD HH:MM:SS.mmm"."""
    now = datetime.now()
    return (
        f"{now.year:04d}-{now.month:02d}-{now.day:02d} "
        f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}.{now.microsecond // 1000:03d}"
    )


def thread_id_string() -> str:
    """Identifier of the calling thread as text."""
    return str(threading.get_ident())


@dataclass(frozen=True)
class SourceLocation:
    """A point in the source: file, line and function."""

    file_name: str | None = None
    line: int = 0
    function_name: str | None = None

    @classmethod
    def current(cls, depth: int = 1) -> SourceLocation:
        """Location of the caller, or of a frame further out when depth > 1."""
        frame = sys._getframe(depth)
        return cls(frame.f_code.co_filename, frame.f_lineno, frame.f_code.co_name)

    def short_file_name(self) -> str:
        """The file name without its directories."""
        if not self.file_name:
            return ""
        return re.split(r"[/\\]", self.file_name)[-1]


@dataclass
class LogEvent:
    """A single log record."""

    level: LogLevel = LogLevel.TRACE
    timestamp: str = ""
    thread_id: str = ""
    location: SourceLocation = field(default_factory=SourceLocation)
    logger_name: str = ""
    message: str = ""


class Color:
    """ANSI colour escape sequences."""

    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BRIGHT_BLACK = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"
    BRIGHT_WHITE = "\033[97m"


_LEVEL_COLORS = {
    LogLevel.TRACE: Color.BRIGHT_BLACK,
    LogLevel.DEBUG: Color.CYAN,
    LogLevel.INFO: Color.GREEN,
    LogLevel.WARN: Color.YELLOW,
    LogLevel.ERROR: Color.RED,
    LogLevel.FATAL: Color.BRIGHT_RED,
}


def color_for_level(level) -> str:
    """Colour escape used for a level; RESET for OFF or unknown levels."""
    return _LEVEL_COLORS.get(_as_level(level), Color.RESET)


@functools.lru_cache(maxsize=None)
def terminal_supports_color() -> bool:
    """Whether $TERM advertises colour support (checked once)."""
    return "color" in os.environ.get("TERM", "")