"""Log levels and parsing of ``scope:level`` specifications."""

from __future__ import annotations

from enum import IntEnum

DEFAULT_SCOPE_NAME = "default"


class Level(IntEnum):
    """Supported log levels, ordered from least to most verbose."""

    NONE = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5

    def __str__(self) -> str:
        return self.name.lower()


_NAME_TO_LEVEL = {str(level): level for level in Level}


def string_to_level(level: str) -> Level:
    """Return the level named by ``level``, ignoring case.

    Raises ValueError for an unknown name.
    """
    try:
        return _NAME_TO_LEVEL[level.lower()]
    except KeyError:
        raise ValueError(f"unknown log level '{level}'") from None


def convert_scoped_level(sl: str) -> tuple[str, Level]:
    """Split a ``[scope:]level`` entry into its scope name and level.

    An entry without a scope prefix refers to the default scope.
    Raises ValueError when the entry is malformed or the level is unknown.
    """
    pieces = sl.split(":")
    if len(pieces) == 1:
        scope, name = DEFAULT_SCOPE_NAME, pieces[0]
    elif len(pieces) == 2:
        scope, name = pieces
    else:
        raise ValueError(f"invalid output level format '{sl}'")

    level = _NAME_TO_LEVEL.get(name)
    if level is None:
        raise ValueError(f"invalid output level '{sl}'")
    return scope, level