"""Structured logging for aggregator runs.

Loggers are immutable and carry bound key-value context. Entries go to a
renderer chosen once per process:

    - console: one human-readable line per entry on stderr
    - json: one JSON object per line on stdout, for log shippers
    - none: discard everything
    - capture: keep entries in memory (tests)

Level and format default to the ``COFLOW_LOG_*`` settings until
configure_logging() is called.

Quick Start:
    >>> from coflow.runtime.observability import get_logger, configure_logging
    >>>
    >>> configure_logging(format="json", level="DEBUG")
    >>> log = get_logger("coflow.race").bind(run=7)
    >>> log.debug("race decided", index=3, early=True)
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TextIO, runtime_checkable

JsonDict = dict[str, object]


@dataclass(slots=True)
class LogEntry:
    """One structured event: when, how severe, what happened, and its context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Wall-clock time with milliseconds, e.g. 14:03:27.512."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]

    def as_record(self) -> JsonDict:
        """Flat mapping for machine-readable output; context keys come last."""
        return {"timestamp": self.ts_iso, "level": self.level, "event": self.event, **self.context}


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Anything that can write out a LogEntry."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(frozen=True, slots=True)
class _Palette:
    reset: str = ""
    bold: str = ""
    dim: str = ""
    key: str = ""
    text: str = ""
    number: str = ""
    other: str = ""
    trace: str = ""
    levels: dict[str, str] = field(default_factory=dict)


_PLAIN = _Palette()
_ANSI = _Palette(
    reset="\033[0m", bold="\033[1m", dim="\033[2m", key="\033[36m", text="\033[33m",
    number="\033[34m", other="\033[37m", trace="\033[31m",
    levels={"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"},
)


def _styled(value: object, p: _Palette) -> str:
    match value:
        case None: return f"{p.dim}none{p.reset}"
        case str(): return f'{p.text}"{value}"{p.reset}'
        case bool(): return f"{p.number}{'true' if value else 'false'}{p.reset}"
        case int() | float(): return f"{p.number}{value}{p.reset}"
        case dict() | list() | tuple() | set(): return f"{p.dim}<{len(value)} items>{p.reset}"
        case _: return f"{p.other}{value!r}{p.reset}"


@dataclass(slots=True)
class ConsoleRenderer:
    """Line-per-entry output: ``[time] [level] event key=value ...``.

    Context keys are sorted; a traceback bound as ``exc_info`` is printed
    below the line. Colors default to on when the stream is a terminal.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        p = _ANSI if self.colors else _PLAIN
        head = f"{p.levels.get(entry.level, '')}[{entry.level}]{p.reset} {p.bold}{entry.event}{p.reset}"
        if self.show_timestamp:
            head = f"{p.dim}{entry.ts_human}{p.reset} {head}"
        fields = " ".join(
            f"{p.key}{key}{p.reset}={_styled(value, p)}"
            for key, value in sorted(entry.context.items())
            if key != "exc_info"
        )
        self.output.write(f"{head} {fields}\n" if fields else f"{head}\n")
        if (trace := entry.context.get("exc_info")) is not None:
            self.output.write(f"{p.trace}{trace}{p.reset}\n")


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines via orjson; values orjson cannot encode are written as repr()."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        import orjson
        payload = orjson.dumps(entry.as_record(), default=repr, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_APPEND_NEWLINE)
        self.output.write(payload.decode())


@dataclass(slots=True)
class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        return None


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps rendered entries in memory for inspection in tests."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Logger with bound context; bind() returns a copy with more context.

    A logger built with an explicit renderer or level ignores the process
    configuration, which lets callers route one aggregator call's events
    somewhere else.

    Example:
        >>> log = BoundLogger(context={"aggregator": "race"})
        >>> log.info("decided", index=3)
        # => 10:30:45.120 [info] decided aggregator="race" index=3
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **kw: object) -> BoundLogger:
        return BoundLogger({**self.context, **kw}, self._renderer, self._level)

    def is_enabled_for(self, level: int) -> bool:
        threshold = _state.level() if self._level is None else self._level
        return level >= threshold

    def _emit(self, level: int, event: str, kw: JsonDict) -> None:
        if self.is_enabled_for(level):
            entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**self.context, **kw})
            (self._renderer or _state.renderer()).render(entry)

    def debug(self, event: str, **kw: object) -> None:
        self._emit(logging.DEBUG, event, kw)

    def info(self, event: str, **kw: object) -> None:
        self._emit(logging.INFO, event, kw)

    def warning(self, event: str, **kw: object) -> None:
        self._emit(logging.WARNING, event, kw)

    def error(self, event: str, **kw: object) -> None:
        self._emit(logging.ERROR, event, kw)

    def exception(self, event: str, **kw: object) -> None:
        """Error-level entry carrying the traceback of the exception being handled."""
        self._emit(logging.ERROR, event, {"exc_info": traceback.format_exc(), **kw})


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide configuration
# ─────────────────────────────────────────────────────────────────────────────


class _LoggingState:
    """Renderer and level shared by loggers without their own.

    Both are read from settings on first use unless configure_logging()
    set them first.
    """

    __slots__ = ("_renderer", "_level")

    def __init__(self) -> None:
        self._renderer: LogRenderer | None = None
        self._level: int | None = None

    def configure(self, renderer: LogRenderer, level: int) -> None:
        self._renderer, self._level = renderer, level

    def clear(self) -> None:
        self._renderer = self._level = None

    def level(self) -> int:
        if self._level is None:
            from coflow.foundation.config import get_settings
            self._level = logging.getLevelNamesMapping()[get_settings().effective_log_level]
        return self._level

    def renderer(self) -> LogRenderer:
        if self._renderer is None:
            from coflow.foundation.config import get_settings
            self._renderer = _renderer_for(get_settings().logging.format)
        return self._renderer


_state = _LoggingState()


def _renderer_for(fmt: str, output: TextIO | None = None, colors: bool | None = None) -> LogRenderer:
    if fmt == "console":
        return ConsoleRenderer(output=output or sys.stderr, colors=colors)
    if fmt == "json":
        return JsonRenderer(output=output or sys.stdout)
    if fmt == "none":
        return NoOpRenderer()
    raise ValueError(f"Unknown format: {fmt!r} (expected 'console', 'json' or 'none')")


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Set the process-wide renderer and level; returns the renderer."""
    renderer = _renderer_for(format, output, colors)
    _state.configure(renderer, logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    return renderer


def reset_logging() -> None:
    """Forget configure_logging(); the next entry re-reads settings."""
    _state.clear()


def get_logger(name: str | None = None, **initial_context: object) -> BoundLogger:
    """Logger with ``initial_context``, plus ``logger=name`` when named."""
    context: JsonDict = dict(initial_context)
    if name:
        context["logger"] = name
    return BoundLogger(context)
