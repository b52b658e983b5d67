"""Configuration of the logging subsystem: sinks, encoders and log capture."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import sys
import threading
import traceback
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Protocol, TextIO

from scopelog.levels import Level, convert_scoped_level
from scopelog.options import Options
from scopelog.scope import Scope, _Entry, _install_writer, default_scope, scopes

_MEGABYTE = 1024 * 1024
_DEFAULT_ROTATION_SIZE_MB = 100
_BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S"


@dataclass
class Config:
    """Logging settings as read from a configuration file."""

    set_log_callers: bool = True
    stack_trace_level: str = "none"
    output_level: str = "none"


def format_date(t: datetime) -> str:
    """Render ``t`` in UTC as ``YYYY-MM-DDTHH:MM:SS.ffffffZ``.

    A naive datetime is taken to be in UTC already.
    """
    t = t.replace(tzinfo=timezone.utc) if t.tzinfo is None else t.astimezone(timezone.utc)
    return (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}.{t.microsecond:06d}Z"
    )


def _encode_fields(fields: dict) -> str:
    return json.dumps(fields, separators=(",", ":"), ensure_ascii=False, default=str)


def _encode_console(entry: _Entry) -> str:
    parts = [format_date(entry.time), str(entry.level)]
    if entry.logger_name:
        parts.append(entry.logger_name)
    if entry.caller:
        parts.append(entry.caller)
    parts.append(entry.message)
    line = "\t".join(parts)
    if entry.fields:
        line += "\t" + _encode_fields(entry.fields)
    if entry.stack:
        line += "\n" + entry.stack.rstrip("\n")
    return line + "\n"


def _encode_json(entry: _Entry) -> str:
    record: dict = {"level": str(entry.level), "time": format_date(entry.time)}
    if entry.logger_name:
        record["scope"] = entry.logger_name
    if entry.caller:
        record["caller"] = entry.caller
    record["msg"] = entry.message
    record.update(entry.fields)
    if entry.stack:
        record["stack"] = entry.stack
    return _encode_fields(record) + "\n"


class _Sink(Protocol):
    def write(self, text: str) -> object: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class _StdStream:
    """Writes to the process's current standard output or error stream."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def _stream(self) -> TextIO:
        return sys.stdout if self._name == "stdout" else sys.stderr

    def write(self, text: str) -> None:
        self._stream.write(text)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        pass


class _FileSink:
    """Appends to a plain file, flushing after every write."""

    def __init__(self, path: str) -> None:
        self._file = open(path, "a", encoding="utf-8")

    def write(self, text: str) -> None:
        self._file.write(text)
        self._file.flush()

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class _MultiSink:
    """Fans every write out to several sinks."""

    def __init__(self, sinks: list[_Sink]) -> None:
        self._sinks = tuple(sinks)

    def __bool__(self) -> bool:
        return bool(self._sinks)

    def write(self, text: str) -> None:
        for sink in self._sinks:
            sink.write(text)

    def flush(self) -> None:
        for sink in self._sinks:
            sink.flush()

    def close(self) -> None:
        for sink in self._sinks:
            with contextlib.suppress(OSError):
                sink.close()


class _RotatingFile:
    """A log file that is renamed to a timestamped backup once it grows too big.

    Backups beyond ``max_backups`` or older than ``max_age`` days are removed;
    zero disables either limit.
    """

    def __init__(self, path: str, max_size: int, max_backups: int, max_age: int) -> None:
        self._path = Path(path)
        self._max_bytes = (max_size if max_size > 0 else _DEFAULT_ROTATION_SIZE_MB) * _MEGABYTE
        self._max_backups = max_backups
        self._max_age = max_age
        self._file = None
        self._size = 0
        self._lock = threading.Lock()
        self._backup_pattern = re.compile(
            re.escape(self._path.stem)
            + r"-(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})\.(\d{3})(?:-(\d+))?"
            + re.escape(self._path.suffix)
        )

    def write(self, text: str) -> None:
        data = text.encode("utf-8")
        with self._lock:
            if len(data) > self._max_bytes:
                raise OSError(
                    f"write length {len(data)} exceeds maximum file size {self._max_bytes}"
                )
            if self._file is None:
                self._open_existing_or_new(len(data))
            if self._size + len(data) > self._max_bytes:
                self._rotate()
            self._file.write(data)
            self._file.flush()
            self._size += len(data)

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            self._close_file()

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _open_existing_or_new(self, pending: int) -> None:
        try:
            size = self._path.stat().st_size
        except FileNotFoundError:
            self._open_new()
            return
        if size + pending >= self._max_bytes:
            self._rotate()
            return
        self._file = open(self._path, "ab")
        self._size = size

    def _open_new(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if self._path.exists():
            os.replace(self._path, self._backup_path())
        self._file = open(self._path, "wb")
        self._size = 0

    def _rotate(self) -> None:
        self._close_file()
        self._open_new()
        self._mill()

    def _backup_path(self) -> Path:
        now = datetime.now(timezone.utc)
        stamp = f"{now.strftime(_BACKUP_TIME_FORMAT)}.{now.microsecond // 1000:03d}"
        stem, suffix = self._path.stem, self._path.suffix
        candidate = self._path.with_name(f"{stem}-{stamp}{suffix}")
        counter = 1
        while candidate.exists():
            candidate = self._path.with_name(f"{stem}-{stamp}-{counter}{suffix}")
            counter += 1
        return candidate

    def _backups(self) -> list[tuple[datetime, int, Path]]:
        found = []
        for entry in self._path.parent.iterdir():
            match = self._backup_pattern.fullmatch(entry.name)
            if match is None:
                continue
            stamp = datetime.strptime(match[1], _BACKUP_TIME_FORMAT).replace(
                microsecond=int(match[2]) * 1000, tzinfo=timezone.utc
            )
            found.append((stamp, int(match[3] or 0), entry))
        found.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return found

    def _mill(self) -> None:
        backups = self._backups()
        doomed = []
        if self._max_backups > 0:
            doomed.extend(backups[self._max_backups:])
            backups = backups[: self._max_backups]
        if self._max_age > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self._max_age)
            doomed.extend(item for item in backups if item[0] < cutoff)
        for _, _, path in doomed:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()


def _open_paths(paths: list[str]) -> list[_Sink]:
    opened: list[_Sink] = []
    try:
        for path in paths:
            if path in ("stdout", "stderr"):
                opened.append(_StdStream(path))
            else:
                opened.append(_FileSink(path))
    except OSError:
        for sink in opened:
            sink.close()
        raise
    return opened


def _record_level(levelno: int) -> Level:
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class _CaptureHandler(logging.Handler):
    """Routes standard-library logging records through the configured output."""

    def __init__(self) -> None:
        super().__init__()
        self.writer: Optional[Callable[[_Entry], None]] = None
        self.error_sink: Optional[_Sink] = None
        self.add_caller = False
        self.stack_level = Level.NONE

    def emit(self, record: logging.LogRecord) -> None:
        level = _record_level(record.levelno)
        if default_scope.output_level < level:
            return
        write, sink = self.writer, self.error_sink
        if write is None:
            return
        try:
            caller = None
            if self.add_caller:
                path = Path(record.pathname)
                caller = f"{path.parent.name}/{path.name}:{record.lineno}"
            stack = ""
            if self.stack_level != Level.NONE and level <= self.stack_level:
                stack = "".join(traceback.format_stack())
            if record.exc_info:
                stack += "".join(traceback.format_exception(*record.exc_info))
            write(
                _Entry(
                    message=record.getMessage(),
                    level=level,
                    time=datetime.fromtimestamp(record.created, timezone.utc),
                    logger_name="" if record.name == "root" else record.name,
                    caller=caller,
                    stack=stack,
                )
            )
        except Exception as exc:
            if sink is not None:
                sink.write(f"{datetime.now()} log write error: {exc}\n")
                sink.flush()


_capture = _CaptureHandler()
_lock = threading.Lock()
_active_sinks: list[_Sink] = []
_output: Optional[_MultiSink] = None


def _parse_scoped_levels(spec: str, known: dict[str, Scope]) -> list[tuple[Scope, Level]]:
    settings = []
    for item in spec.split(","):
        name, level = convert_scoped_level(item)
        if name not in known:
            raise ValueError(f"unknown scope '{name}' specified")
        settings.append((known[name], level))
    return settings


def _parse_callers(spec: str, known: dict[str, Scope]) -> list[Scope]:
    selected = []
    for name in spec.split(","):
        if not name:
            continue
        if name not in known:
            raise ValueError(f"unknown scope '{name}' specified")
        selected.append(known[name])
    return selected


def configure(options: Options) -> None:
    """Set up the logging subsystem from ``options``.

    Raises ValueError for malformed level settings or unknown scopes and
    OSError when an output path cannot be opened. On failure the previous
    configuration stays in effect.
    """
    global _active_sinks, _output

    known = scopes()
    output_levels = _parse_scoped_levels(options.output_levels, known)
    stack_levels = _parse_scoped_levels(options.stack_trace_levels, known)
    callers = _parse_callers(options.log_callers, known)

    error_sink = _MultiSink(_open_paths(options.error_output_paths))
    try:
        outputs = _open_paths(options.output_paths)
    except OSError:
        error_sink.close()
        raise
    if options.rotate_output_path:
        outputs.append(
            _RotatingFile(
                options.rotate_output_path,
                options.rotation_max_size,
                options.rotation_max_backups,
                options.rotation_max_age,
            )
        )
    output = _MultiSink(outputs) if outputs else None
    encode = _encode_json if options.json_encoding else _encode_console

    def write(entry: _Entry) -> None:
        if output is not None:
            output.write(encode(entry))

    with _lock:
        previous = _active_sinks
        _install_writer(write, error_sink)
        for scope, level in output_levels:
            scope.output_level = level
        for scope, level in stack_levels:
            scope.stack_trace_level = level
        for scope in callers:
            scope.log_callers = True
        _output = output
        _active_sinks = [error_sink] + ([output] if output is not None else [])

        _capture.writer = write
        _capture.error_sink = error_sink
        _capture.add_caller = default_scope.log_callers
        _capture.stack_level = default_scope.stack_trace_level

    root = logging.getLogger()
    if _capture not in root.handlers:
        root.addHandler(_capture)
    root.setLevel(logging.DEBUG)

    for sink in previous:
        with contextlib.suppress(OSError):
            sink.close()


def sync() -> None:
    """Flush any buffered log output."""
    with _lock:
        output = _output
    if output is not None:
        output.flush()


with contextlib.suppress(OSError, ValueError):
    configure(Options())