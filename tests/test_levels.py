import pytest

from scopelog.levels import (
    DEFAULT_SCOPE_NAME,
    Level,
    convert_scoped_level,
    string_to_level,
)


def test_levels_are_ordered_by_verbosity():
    names = ["debug", "none", "warn", "fatal", "info", "error"]
    parsed = sorted(string_to_level(name) for name in names)
    assert parsed == [Level.NONE, Level.FATAL, Level.ERROR, Level.WARN, Level.INFO, Level.DEBUG]


def test_level_names():
    names = ["none", "fatal", "error", "warn", "info", "debug"]
    assert [str(string_to_level(name)) for name in names] == names


@pytest.mark.parametrize("level", list(Level))
def test_string_round_trip(level):
    assert string_to_level(str(level)) is level


@pytest.mark.parametrize("level", list(Level))
def test_string_to_level_ignores_case(level):
    assert string_to_level(str(level).upper()) is level


def test_string_to_level_unknown():
    with pytest.raises(ValueError):
        string_to_level("badLevel")


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("debug", (DEFAULT_SCOPE_NAME, Level.DEBUG)),
        ("default:debug", ("default", Level.DEBUG)),
        ("info", (DEFAULT_SCOPE_NAME, Level.INFO)),
        ("default:info", ("default", Level.INFO)),
        ("warn", (DEFAULT_SCOPE_NAME, Level.WARN)),
        ("default:warn", ("default", Level.WARN)),
        ("error", (DEFAULT_SCOPE_NAME, Level.ERROR)),
        ("default:error", ("default", Level.ERROR)),
        ("none", (DEFAULT_SCOPE_NAME, Level.NONE)),
        ("TestSetLevel:debug", ("TestSetLevel", Level.DEBUG)),
    ],
)
def test_convert_scoped_level(spec, expected):
    assert convert_scoped_level(spec) == expected


@pytest.mark.parametrize(
    "spec",
    ["badLevel", "default:badLevel", "default:err:or", "", "default:", "DEBUG"],
)
def test_convert_scoped_level_rejects(spec):
    with pytest.raises(ValueError):
        convert_scoped_level(spec)


def test_convert_format_error_message():
    with pytest.raises(ValueError, match="invalid output level format 'default:err:or'"):
        convert_scoped_level("default:err:or")