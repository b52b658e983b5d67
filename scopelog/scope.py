"""Named logging scopes with independently adjustable levels."""

from __future__ import annotations

import sys
import threading
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

from scopelog.levels import DEFAULT_SCOPE_NAME, Level

_CALLER_SKIP_OFFSET = 2


@dataclass(frozen=True)
class _Entry:
    """A single log record handed to the installed writer."""

    message: str
    level: Level
    time: datetime
    logger_name: str = ""
    caller: Optional[str] = None
    stack: str = ""
    fields: dict[str, Any] = field(default_factory=dict)


_WriteFn = Callable[[_Entry], Any]

_registry: dict[str, "Scope"] = {}
_registry_lock = threading.Lock()

_writer: Optional[_WriteFn] = None
_error_sink: Optional[TextIO] = None


def _install_writer(
    write: Optional[_WriteFn], error_sink: Optional[TextIO]
) -> tuple[Optional[_WriteFn], Optional[TextIO]]:
    """Set the function that receives entries and the sink for write errors.

    Returns the previously installed pair.
    """
    global _writer, _error_sink
    previous = (_writer, _error_sink)
    _writer, _error_sink = write, error_sink
    return previous


def _sprint(args: tuple[Any, ...]) -> str:
    parts: list[str] = []
    previous: Any = None
    for position, arg in enumerate(args):
        if position and not isinstance(arg, str) and not isinstance(previous, str):
            parts.append(" ")
        parts.append(str(arg))
        previous = arg
    return "".join(parts)


def _sprintf(template: str, args: tuple[Any, ...]) -> str:
    return template % args if args else template


def _short_caller(frame) -> str:
    path = Path(frame.f_code.co_filename)
    return f"{path.parent.name}/{path.name}:{frame.f_lineno}"


class Scope:
    """Logs messages for one area of code under its own level settings."""

    def __init__(self, name: str, description: str, caller_skip: int) -> None:
        self._name = name
        self._description = description
        self._caller_skip = caller_skip
        self._name_to_emit = "" if name == DEFAULT_SCOPE_NAME else name
        self.output_level: Level = Level.INFO
        self.stack_trace_level: Level = Level.NONE
        self.log_callers: bool = False

    def __repr__(self) -> str:
        return f"Scope(name={self._name!r}, output_level={self.output_level!s})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def caller_skip(self) -> int:
        return self._caller_skip

    # fatal

    def fatal(self, msg: str, **kwargs: Any) -> None:
        """Output a message at fatal level."""
        if self.output_level >= Level.FATAL:
            self._emit(Level.FATAL, self.stack_trace_level >= Level.FATAL, msg, kwargs)

    def fatalf(self, template: str, *args: Any) -> None:
        """Format a printf-style message and log it at fatal level."""
        if self.output_level >= Level.FATAL:
            self._emit(Level.FATAL, self.stack_trace_level >= Level.FATAL, _sprintf(template, args), {})

    def fatala(self, *args: Any) -> None:
        """Join the arguments into a message and log it at fatal level."""
        if self.output_level >= Level.FATAL:
            self._emit(Level.FATAL, self.stack_trace_level >= Level.FATAL, _sprint(args), {})

    def fatal_enabled(self) -> bool:
        return self.output_level >= Level.FATAL

    # error

    def error(self, msg: str, **kwargs: Any) -> None:
        """Output a message at error level."""
        if self.output_level >= Level.ERROR:
            self._emit(Level.ERROR, self.stack_trace_level >= Level.ERROR, msg, kwargs)

    def errorf(self, template: str, *args: Any) -> None:
        """Format a printf-style message and log it at error level."""
        if self.output_level >= Level.ERROR:
            self._emit(Level.ERROR, self.stack_trace_level >= Level.ERROR, _sprintf(template, args), {})

    def errora(self, *args: Any) -> None:
        """Join the arguments into a message and log it at error level."""
        if self.output_level >= Level.ERROR:
            self._emit(Level.ERROR, self.stack_trace_level >= Level.ERROR, _sprint(args), {})

    def error_enabled(self) -> bool:
        return self.output_level >= Level.ERROR

    # warn

    def warn(self, msg: str, **kwargs: Any) -> None:
        """Output a message at warn level."""
        if self.output_level >= Level.WARN:
            self._emit(Level.WARN, self.stack_trace_level >= Level.ERROR, msg, kwargs)

    def warnf(self, template: str, *args: Any) -> None:
        """Format a printf-style message and log it at warn level."""
        if self.output_level >= Level.WARN:
            self._emit(Level.WARN, self.stack_trace_level >= Level.ERROR, _sprintf(template, args), {})

    def warna(self, *args: Any) -> None:
        """Join the arguments into a message and log it at warn level."""
        if self.output_level >= Level.WARN:
            self._emit(Level.WARN, self.stack_trace_level >= Level.ERROR, _sprint(args), {})

    def warn_enabled(self) -> bool:
        return self.output_level >= Level.WARN

    # info

    def info(self, msg: str, **kwargs: Any) -> None:
        """Output a message at info level."""
        if self.output_level >= Level.INFO:
            self._emit(Level.INFO, self.stack_trace_level >= Level.ERROR, msg, kwargs)

    def infof(self, template: str, *args: Any) -> None:
        """Format a printf-style message and log it at info level."""
        if self.output_level >= Level.INFO:
            self._emit(Level.INFO, self.stack_trace_level >= Level.ERROR, _sprintf(template, args), {})

    def infoa(self, *args: Any) -> None:
        """Join the arguments into a message and log it at info level."""
        if self.output_level >= Level.INFO:
            self._emit(Level.INFO, self.stack_trace_level >= Level.ERROR, _sprint(args), {})

    def info_enabled(self) -> bool:
        return self.output_level >= Level.INFO

    # debug

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Output a message at debug level."""
        if self.output_level >= Level.DEBUG:
            self._emit(Level.DEBUG, self.stack_trace_level >= Level.ERROR, msg, kwargs)

    def debugf(self, template: str, *args: Any) -> None:
        """Format a printf-style message and log it at debug level."""
        if self.output_level >= Level.DEBUG:
            self._emit(Level.DEBUG, self.stack_trace_level >= Level.ERROR, _sprintf(template, args), {})

    def debuga(self, *args: Any) -> None:
        """Join the arguments into a message and log it at debug level."""
        if self.output_level >= Level.DEBUG:
            self._emit(Level.DEBUG, self.stack_trace_level >= Level.ERROR, _sprint(args), {})

    def debug_enabled(self) -> bool:
        return self.output_level >= Level.DEBUG

    def _emit(self, level: Level, dump_stack: bool, msg: str, fields: dict[str, Any]) -> None:
        # Frame 0 is this method, frame 1 the logging method, frame 2 its caller.
        try:
            frame = sys._getframe(_CALLER_SKIP_OFFSET + self._caller_skip)
        except ValueError:
            frame = None

        caller = _short_caller(frame) if self.log_callers and frame is not None else None
        stack = "".join(traceback.format_stack(frame)) if dump_stack and frame is not None else ""

        entry = _Entry(
            message=msg,
            level=level,
            time=datetime.now(timezone.utc),
            logger_name=self._name_to_emit,
            caller=caller,
            stack=stack,
            fields=dict(fields),
        )

        write, sink = _writer, _error_sink
        if write is None:
            return
        try:
            write(entry)
        except Exception as exc:
            if sink is not None:
                sink.write(f"{datetime.now()} log write error: {exc}\n")
                sink.flush()


def register_scope(name: str, description: str, caller_skip: int = 0) -> Scope:
    """Register a scope, or return the existing one with the same name.

    Scope names cannot contain colons, commas or periods; ValueError is raised
    for such names.
    """
    if any(ch in name for ch in ":,."):
        raise ValueError(f"invalid scope name '{name}'")
    with _registry_lock:
        scope = _registry.get(name)
        if scope is None:
            scope = Scope(name, description, caller_skip)
            _registry[name] = scope
        return scope


def find_scope(name: str) -> Optional[Scope]:
    """Return a previously registered scope, or None."""
    with _registry_lock:
        return _registry.get(name)


def scopes() -> dict[str, Scope]:
    """Return a snapshot of the registered scopes keyed by name."""
    with _registry_lock:
        return dict(_registry)


default_scope = register_scope(DEFAULT_SCOPE_NAME, "Unscoped logging messages.", 0)