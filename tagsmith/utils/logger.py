"""
Tagsmith Logger
===============

Structured logging for the compiler. Messages carry key=value context
instead of interpolated strings::

    logger = get_logger("tagsmith.elements")
    logger.debug("Compiled element", tag="my-tag", expressions=3)

Loggers are cached by name and share one set of handlers, so
``configure_logging`` also reaches loggers created at import time.
"""

from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

import orjson


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Accept ``"debug"``, ``10`` or a LogLevel."""
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value!r}") from None
        return cls(value)


@dataclass
class LogRecord:
    """One log event and the context attached to it."""

    level: LogLevel
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "tagsmith"
    created: datetime = field(default_factory=datetime.now)

    @property
    def traceback(self) -> str:
        if self.exception is None:
            return ""
        exc = self.exception
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "time": self.created.isoformat(),
            "level": self.level.name,
            "logger": self.logger_name,
            "message": self.message,
        }
        if self.context:
            data["context"] = self.context
        if self.exception is not None:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
                "traceback": self.traceback,
            }
        return data


class TextFormatter:
    """
    ``time [LEVEL] logger: message key=value ...``

    Example output:
        2026-01-15 10:30:45 [DEBUG] tagsmith.elements: Compiled element tag=my-tag
    """

    def __init__(self, time_format: str = "%Y-%m-%d %H:%M:%S"):
        self.time_format = time_format

    def format(self, record: LogRecord) -> str:
        line = (
            f"{record.created.strftime(self.time_format)} "
            f"[{record.level.name}] {record.logger_name}: {record.message}"
        )
        if record.context:
            line += " " + " ".join(f"{key}={value}" for key, value in record.context.items())
        if record.exception is not None:
            line += "\n" + record.traceback.rstrip("\n")
        return line


class JsonFormatter:
    """One JSON object per line; values orjson cannot encode become strings."""

    def __init__(self, sort_keys: bool = False):
        self.option = orjson.OPT_SORT_KEYS if sort_keys else 0

    def format(self, record: LogRecord) -> str:
        return orjson.dumps(record.to_dict(), option=self.option, default=str).decode()


Formatter = Union[TextFormatter, JsonFormatter]


class Handler:
    """Formats records at or above its level and writes the lines."""

    def __init__(self, formatter: Optional[Formatter] = None, level: LogLevel = LogLevel.DEBUG):
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level >= self.level:
            self.write(self.formatter.format(record))

    def write(self, line: str) -> None:
        raise NotImplementedError


class StreamHandler(Handler):
    """Writes to a stream; stderr is looked up on every write."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[Formatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        super().__init__(formatter, level)
        self.stream = stream

    def write(self, line: str) -> None:
        stream = self.stream or sys.stderr
        stream.write(line + "\n")
        stream.flush()


class FileHandler(Handler):
    """Appends JSON lines to a file unless given another formatter."""

    def __init__(
        self,
        path: Union[str, Path],
        formatter: Optional[Formatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        super().__init__(formatter or JsonFormatter(), level)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, line: str) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")


class Logger:
    """
    Named logger with a level, handlers and bound context.

    Example:
        logger = Logger("tagsmith.css", handlers=[StreamHandler()])
        logger.info("Scoped stylesheet", tag="my-tag")

        compiling = logger.with_context(url="components/app.tag")
        compiling.debug("Compiling")  # ... Compiling url=components/app.tag
    """

    def __init__(
        self,
        name: str = "tagsmith",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[Handler]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.level = level
        self.handlers = handlers if handlers is not None else []
        self.context = context or {}

    def add_handler(self, handler: Handler) -> "Logger":
        self.handlers.append(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Logger sharing this one's handlers, with more bound context."""
        return Logger(self.name, self.level, self.handlers, {**self.context, **context})

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(level, message, {**self.context, **context}, exception, self.name)
        for handler in self.handlers:
            try:
                handler.handle(record)
            except Exception as exc:
                sys.stderr.write(f"--- Logging error in {type(handler).__name__}: {exc}\n")

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(self, message: str, exception: Optional[BaseException] = None, **context: Any) -> None:
        self.log(LogLevel.ERROR, message, exception=exception, **context)

    def exception(self, message: str, **context: Any) -> None:
        """Error record for the exception being handled."""
        self.log(LogLevel.ERROR, message, exception=sys.exc_info()[1], **context)


@dataclass
class LoggingState:
    level: LogLevel = LogLevel.WARNING
    handlers: List[Handler] = field(default_factory=lambda: [StreamHandler()])
    loggers: Dict[str, Logger] = field(default_factory=dict)


_state = LoggingState()


def get_logger(name: str = "tagsmith") -> Logger:
    """Cached logger, conventionally named ``tagsmith.<module>``."""
    logger = _state.loggers.get(name)
    if logger is None:
        logger = _state.loggers[name] = Logger(name, _state.level, _state.handlers)
    return logger


def configure_logging(
    level: Union[str, int, LogLevel] = LogLevel.WARNING,
    format: str = "text",
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> Logger:
    """
    Configure every tagsmith logger.

    Args:
        level: Minimum level
        format: Console format, ``"text"`` or ``"json"``
        log_file: Optional file receiving the same records as JSON lines
        stream: Console stream, stderr by default

    Returns:
        The ``tagsmith`` logger

    Raises:
        ValueError: Unknown level or format
    """
    formatters = {"text": TextFormatter, "json": JsonFormatter}
    if format not in formatters:
        raise ValueError(f"Unknown log format: {format!r}")
    level = LogLevel.parse(level)

    handlers: List[Handler] = [StreamHandler(stream, formatters[format](), level)]
    if log_file:
        handlers.append(FileHandler(log_file, level=level))

    # Replaced in place; cached loggers hold this list
    _state.handlers[:] = handlers
    _state.level = level
    for logger in _state.loggers.values():
        logger.level = level

    return get_logger("tagsmith")
