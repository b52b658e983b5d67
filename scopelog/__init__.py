"""Scoped logging with per-scope levels, caller info, stack traces and rotating file output."""

__version__ = "0.1.0"