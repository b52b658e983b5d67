"""Logging through the default scope."""

from __future__ import annotations

from typing import Any

import scopelog.config  # noqa: F401  # installs the default configuration
from scopelog.levels import Level
from scopelog.scope import _sprint, _sprintf, default_scope

# Each function calls the scope's emitter directly so that caller lookup
# sees the same call depth as the scope's own methods.


def fatal(msg: str, **kwargs: Any) -> None:
    """Output a message at fatal level."""
    if default_scope.output_level >= Level.FATAL:
        default_scope._emit(Level.FATAL, default_scope.stack_trace_level >= Level.FATAL, msg, kwargs)


def fatalf(template: str, *args: Any) -> None:
    """Format a printf-style message and log it at fatal level."""
    if default_scope.output_level >= Level.FATAL:
        default_scope._emit(
            Level.FATAL, default_scope.stack_trace_level >= Level.FATAL, _sprintf(template, args), {}
        )


def fatala(*args: Any) -> None:
    """Join the arguments into a message and log it at fatal level."""
    if default_scope.output_level >= Level.FATAL:
        default_scope._emit(Level.FATAL, default_scope.stack_trace_level >= Level.FATAL, _sprint(args), {})


def fatal_enabled() -> bool:
    """Return whether fatal-level output is enabled."""
    return default_scope.output_level >= Level.FATAL


def error(msg: str, **kwargs: Any) -> None:
    """Output a message at error level."""
    if default_scope.output_level >= Level.ERROR:
        default_scope._emit(Level.ERROR, default_scope.stack_trace_level >= Level.ERROR, msg, kwargs)


def errorf(template: str, *args: Any) -> None:
    """Format a printf-style message and log it at error level."""
    if default_scope.output_level >= Level.ERROR:
        default_scope._emit(
            Level.ERROR, default_scope.stack_trace_level >= Level.ERROR, _sprintf(template, args), {}
        )


def errora(*args: Any) -> None:
    """Join the arguments into a message and log it at error level."""
    if default_scope.output_level >= Level.ERROR:
        default_scope._emit(Level.ERROR, default_scope.stack_trace_level >= Level.ERROR, _sprint(args), {})


def error_enabled() -> bool:
    """Return whether error-level output is enabled."""
    return default_scope.output_level >= Level.ERROR


def warn(msg: str, **kwargs: Any) -> None:
    """Output a message at warn level."""
    if default_scope.output_level >= Level.WARN:
        default_scope._emit(Level.WARN, default_scope.stack_trace_level >= Level.WARN, msg, kwargs)


def warnf(template: str, *args: Any) -> None:
    """Format a printf-style message and log it at warn level."""
    if default_scope.output_level >= Level.WARN:
        default_scope._emit(
            Level.WARN, default_scope.stack_trace_level >= Level.WARN, _sprintf(template, args), {}
        )


def warna(*args: Any) -> None:
    """Join the arguments into a message and log it at warn level."""
    if default_scope.output_level >= Level.WARN:
        default_scope._emit(Level.WARN, default_scope.stack_trace_level >= Level.WARN, _sprint(args), {})


def warn_enabled() -> bool:
    """Return whether warn-level output is enabled."""
    return default_scope.output_level >= Level.WARN


def info(msg: str, **kwargs: Any) -> None:
    """Output a message at info level."""
    if default_scope.output_level >= Level.INFO:
        default_scope._emit(Level.INFO, default_scope.stack_trace_level >= Level.INFO, msg, kwargs)


def infof(template: str, *args: Any) -> None:
    """Format a printf-style message and log it at info level."""
    if default_scope.output_level >= Level.INFO:
        default_scope._emit(
            Level.INFO, default_scope.stack_trace_level >= Level.INFO, _sprintf(template, args), {}
        )


def infoa(*args: Any) -> None:
    """Join the arguments into a message and log it at info level."""
    if default_scope.output_level >= Level.INFO:
        default_scope._emit(Level.INFO, default_scope.stack_trace_level >= Level.INFO, _sprint(args), {})


def info_enabled() -> bool:
    """Return whether info-level output is enabled."""
    return default_scope.output_level >= Level.INFO


def debug(msg: str, **kwargs: Any) -> None:
    """Output a message at debug level."""
    if default_scope.output_level >= Level.DEBUG:
        default_scope._emit(Level.DEBUG, default_scope.stack_trace_level >= Level.DEBUG, msg, kwargs)


def debugf(template: str, *args: Any) -> None:
    """Format a printf-style message and log it at debug level."""
    if default_scope.output_level >= Level.DEBUG:
        default_scope._emit(
            Level.DEBUG, default_scope.stack_trace_level >= Level.DEBUG, _sprintf(template, args), {}
        )


def debuga(*args: Any) -> None:
    """Join the arguments into a message and log it at debug level."""
    if default_scope.output_level >= Level.DEBUG:
        default_scope._emit(Level.DEBUG, default_scope.stack_trace_level >= Level.DEBUG, _sprint(args), {})


def debug_enabled() -> bool:
    """Return whether debug-level output is enabled."""
    return default_scope.output_level >= Level.DEBUG