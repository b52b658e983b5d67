"""Settings that control how the logging subsystem is configured."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from scopelog.levels import DEFAULT_SCOPE_NAME, Level, convert_scoped_level
from scopelog.scope import scopes

DEFAULT_OUTPUT_LEVEL = Level.INFO
DEFAULT_STACK_TRACE_LEVEL = Level.NONE
DEFAULT_OUTPUT_PATH = "stdout"
DEFAULT_ERROR_OUTPUT_PATH = "stderr"
DEFAULT_ROTATION_MAX_AGE = 30
DEFAULT_ROTATION_MAX_SIZE = 100 * 1024 * 1024
DEFAULT_ROTATION_MAX_BACKUPS = 1000

_LEVEL_LIST = "[" + ", ".join(
    str(level)
    for level in (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR, Level.FATAL, Level.NONE)
) + "]"


def _set_scoped_level(spec: str, scope: str, level: Level) -> str:
    """Return ``spec`` with the entry for ``scope`` replaced or appended."""
    entry = f"{scope}:{level}"
    entries = spec.split(",")

    if scope == DEFAULT_SCOPE_NAME:
        # An entry without a scope prefix stands for the default scope.
        for position, current in enumerate(entries):
            if ":" not in current:
                entries[position] = entry
                return ",".join(entries)

    prefix = scope + ":"
    for position, current in enumerate(entries):
        if current.startswith(prefix):
            entries[position] = entry
            return ",".join(entries)

    entries.append(entry)
    return ",".join(entries)


def _get_scoped_level(spec: str, scope: str) -> Level:
    """Return the level that ``spec`` assigns to ``scope``."""
    entries = spec.split(",")

    if scope == DEFAULT_SCOPE_NAME:
        unscoped = next((e for e in entries if ":" not in e), None)
        if unscoped is not None:
            return convert_scoped_level(unscoped)[1]

    prefix = scope + ":"
    match = next((e for e in entries if e.startswith(prefix)), None)
    if match is not None:
        return convert_scoped_level(match)[1]

    raise ValueError(f"no level defined for scope '{scope}'")


class _StringArrayAction(argparse.Action):
    """Collect repeated values, replacing the default on first use."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: Optional[str] = None,
    ) -> None:
        current = getattr(namespace, self.dest, None)
        if current is None or current is self.default:
            setattr(namespace, self.dest, [values])
        else:
            current.append(values)


@dataclass
class Options:
    """The full set of options understood by the logging subsystem.

    ``output_levels`` and ``stack_trace_levels`` hold comma-separated
    ``[scope:]level`` entries; ``log_callers`` holds a comma-separated list
    of scope names.
    """

    output_paths: list[str] = field(default_factory=lambda: [DEFAULT_OUTPUT_PATH])
    error_output_paths: list[str] = field(default_factory=lambda: [DEFAULT_ERROR_OUTPUT_PATH])
    rotate_output_path: str = ""
    rotation_max_size: int = DEFAULT_ROTATION_MAX_SIZE
    rotation_max_age: int = DEFAULT_ROTATION_MAX_AGE
    rotation_max_backups: int = DEFAULT_ROTATION_MAX_BACKUPS
    json_encoding: bool = False
    log_grpc: bool = True
    output_levels: str = f"{DEFAULT_SCOPE_NAME}:{DEFAULT_OUTPUT_LEVEL}"
    log_callers: str = ""
    stack_trace_levels: str = f"{DEFAULT_SCOPE_NAME}:{DEFAULT_STACK_TRACE_LEVEL}"

    def set_output_level(self, scope: str, level: Level) -> None:
        """Set the minimum output level for ``scope``."""
        self.output_levels = _set_scoped_level(self.output_levels, scope, level)

    def get_output_level(self, scope: str) -> Level:
        """Return the minimum output level for ``scope``.

        Raises ValueError when no valid level is defined for it.
        """
        return _get_scoped_level(self.output_levels, scope)

    def set_stack_trace_level(self, scope: str, level: Level) -> None:
        """Set the minimum stack tracing level for ``scope``."""
        self.stack_trace_levels = _set_scoped_level(self.stack_trace_levels, scope, level)

    def get_stack_trace_level(self, scope: str) -> Level:
        """Return the minimum stack tracing level for ``scope``.

        Raises ValueError when no valid level is defined for it.
        """
        return _get_scoped_level(self.stack_trace_levels, scope)

    def set_log_callers(self, scope: str, include: bool) -> None:
        """Choose whether caller locations are output for ``scope``."""
        names = ["" if name == scope else name for name in self.log_callers.split(",")]
        if include:
            if "" in names:
                names[names.index("")] = scope
            else:
                names.append(scope)
        self.log_callers = ",".join(names)

    def get_log_callers(self, scope: str) -> bool:
        """Return whether caller locations are output for ``scope``."""
        return scope in self.log_callers.split(",")

    def attach_flags(self, parser: argparse.ArgumentParser) -> None:
        """Add the logging command-line flags to ``parser``.

        Parse with ``parser.parse_args(argv, namespace=options)`` to store the
        values straight into these options.
        """
        parser.add_argument(
            "--log_target",
            dest="output_paths",
            action=_StringArrayAction,
            default=self.output_paths,
            help="The set of paths where to output the log. This can be any path "
            "as well as the special values stdout and stderr",
        )
        parser.add_argument(
            "--log_rotate",
            dest="rotate_output_path",
            default=self.rotate_output_path,
            help="The path for the optional rotating log file",
        )
        parser.add_argument(
            "--log_rotate_max_age",
            dest="rotation_max_age",
            type=int,
            default=self.rotation_max_age,
            help="The maximum age in days of a log file beyond which the file is "
            "rotated (0 indicates no limit)",
        )
        parser.add_argument(
            "--log_rotate_max_size",
            dest="rotation_max_size",
            type=int,
            default=self.rotation_max_size,
            help="The maximum size in megabytes of a log file beyond which the file is rotated",
        )
        parser.add_argument(
            "--log_rotate_max_backups",
            dest="rotation_max_backups",
            type=int,
            default=self.rotation_max_backups,
            help="The maximum number of log file backups to keep before older files "
            "are deleted (0 indicates no limit)",
        )
        parser.add_argument(
            "--log_as_json",
            dest="json_encoding",
            action="store_true",
            default=self.json_encoding,
            help="Whether to format output as JSON or in plain console-friendly format",
        )

        registered = scopes()
        if len(registered) > 1:
            names = ", ".join(sorted(registered))
            output_help = (
                "Comma-separated minimum per-scope logging level of messages to output, "
                "in the form of <scope>:<level>,<scope>:<level>,... where scope can be "
                f"one of [{names}] and level can be one of {_LEVEL_LIST}"
            )
            stack_help = (
                "Comma-separated minimum per-scope logging level at which stack traces "
                "are captured, in the form of <scope>:<level>,<scope:level>,... where "
                f"scope can be one of [{names}] and level can be one of {_LEVEL_LIST}"
            )
            caller_help = (
                "Comma-separated list of scopes for which to include caller "
                f"information, scopes can be any of [{names}]"
            )
        else:
            output_help = (
                f"The minimum logging level of messages to output, can be one of {_LEVEL_LIST}"
            )
            stack_help = (
                "The minimum logging level at which stack traces are captured, "
                f"can be one of {_LEVEL_LIST}"
            )
            caller_help = (
                "Comma-separated list of scopes for which to include caller "
                "information, scopes can be any of [default]"
            )

        parser.add_argument(
            "--log_output_level",
            dest="output_levels",
            default=self.output_levels,
            help=output_help,
        )
        parser.add_argument(
            "--log_stacktrace_level",
            dest="stack_trace_levels",
            default=self.stack_trace_levels,
            help=stack_help,
        )
        parser.add_argument(
            "--log_caller",
            dest="log_callers",
            default=self.log_callers,
            help=caller_help,
        )


def _parse(options: Options, argv: Sequence[str]) -> Options:
    parser = argparse.ArgumentParser()
    options.attach_flags(parser)
    parser.parse_args(list(argv), namespace=options)
    return options