import json
import logging
import re
from datetime import datetime, timedelta, timezone

import pytest

from scopelog.config import Config, configure, format_date, sync
from scopelog.levels import DEFAULT_SCOPE_NAME, Level
from scopelog.options import Options
from scopelog.scope import default_scope, register_scope

TIME = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}Z"


def _reset():
    configure(Options())
    default_scope.output_level = Level.INFO
    default_scope.stack_trace_level = Level.NONE
    default_scope.log_callers = False


@pytest.fixture(autouse=True)
def restore_logging():
    _reset()
    yield
    _reset()


def test_config_defaults():
    assert Config() == Config(set_log_callers=True, stack_trace_level="none", output_level="none")


@pytest.mark.parametrize(
    "year, want",
    [(1, "0001"), (1989, "1989"), (2017, "2017"), (2083, "2083"), (2573, "2573"), (9999, "9999")],
)
def test_timestamp_proper_year(year, want):
    out = format_date(datetime(year, 4, 1, 1, 1, 1, 0, tzinfo=timezone.utc))
    assert out.startswith(want)


@pytest.mark.parametrize(
    "micros, want",
    [(1, "1"), (99, "99"), (999, "999"), (9999, "9999"), (99999, "99999"), (999999, "999999")],
)
def test_timestamp_proper_micros(micros, want):
    out = format_date(datetime(2017, 4, 1, 1, 1, 1, micros, tzinfo=timezone.utc))
    assert out.endswith(want + "Z")


def test_format_date_full_value():
    t = datetime(2017, 1, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert format_date(t) == "2017-01-02T03:04:05.000006Z"


def test_format_date_converts_to_utc():
    t = datetime(2020, 1, 1, 1, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_date(t) == "2019-12-31T23:00:00.000000Z"


def test_format_date_naive_is_utc():
    assert format_date(datetime(2021, 6, 7, 8, 9, 10, 11)) == "2021-06-07T08:09:10.000011Z"


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("output_levels", "default,,"),
        ("output_levels", "foobar"),
        ("output_levels", "foobar:debug"),
        ("stack_trace_levels", "default,,"),
        ("stack_trace_levels", "foobar"),
        ("stack_trace_levels", "foobar:debug"),
        ("log_callers", "foobar"),
    ],
)
def test_oddball_settings(attribute, value):
    o = Options()
    setattr(o, attribute, value)
    with pytest.raises(ValueError):
        configure(o)


def test_invalid_output_path():
    with pytest.raises(OSError):
        configure(Options(output_paths=["//"]))


def test_invalid_error_output_path():
    with pytest.raises(OSError):
        configure(Options(error_output_paths=["//"]))


def test_failed_configure_keeps_previous(capsys):
    configure(Options())
    with pytest.raises(ValueError):
        configure(Options(output_levels="foobar:debug"))
    default_scope.error("still here")
    out = capsys.readouterr().out
    assert re.fullmatch(TIME + r"\terror\tstill here", out.split("\n")[0])


def test_log_callers_for_registered_scope():
    scope = register_scope("configCallers", "", 0)
    scope.log_callers = False
    configure(Options(log_callers="configCallers"))
    assert scope.log_callers is True
    scope.log_callers = False


def test_output_levels_applied_to_scope():
    scope = register_scope("configLevels", "", 0)
    configure(Options(output_levels="default:info,configLevels:debug",
                      stack_trace_levels="configLevels:error"))
    assert scope.output_level == Level.DEBUG
    assert scope.stack_trace_level == Level.ERROR
    assert default_scope.output_level == Level.INFO


def test_file_output_and_sync(tmp_path):
    target = tmp_path / "plain.log"
    configure(Options(output_paths=[str(target)]))
    default_scope.info("to file")
    sync()
    parts = target.read_text().split("\n")[0].split("\t")
    assert parts[1:] == ["info", "to file"]
    assert re.fullmatch(TIME, parts[0]) is not None


def test_rotate_no_stdout(tmp_path, capsys):
    target = tmp_path / "rot.log"
    configure(Options(output_paths=[], rotate_output_path=str(target)))
    default_scope.error("HELLO")
    sync()
    lines = target.read_text().split("\n")
    assert "HELLO" in lines[0]
    assert capsys.readouterr().out == ""


def test_rotate_and_stdout(tmp_path, capsys):
    target = tmp_path / "rot.log"
    configure(Options(rotate_output_path=str(target)))
    default_scope.error("HELLO")
    sync()
    assert "HELLO" in target.read_text().split("\n")[0]
    assert "HELLO" in capsys.readouterr().out.split("\n")[0]


def test_rotate_max_backups(tmp_path):
    target = tmp_path / "rot.log"
    o = Options(
        output_paths=[],
        rotate_output_path=str(target),
        rotation_max_size=1,
        rotation_max_backups=2,
        rotation_max_age=30,
    )
    configure(o)
    line = "0123456789ABCDEF" * 8
    for _ in range(4 * 1024 * 8):
        default_scope.info(line)
    sync()
    files = list(tmp_path.iterdir())
    assert 2 <= len(files) <= o.rotation_max_backups + 1
    assert target in files


def test_write_error_goes_to_error_sink(tmp_path):
    errors = tmp_path / "errors.log"
    configure(
        Options(
            output_paths=[],
            error_output_paths=[str(errors)],
            rotate_output_path=str(tmp_path / "rot.log"),
            rotation_max_size=1,
        )
    )
    default_scope.info("x" * (1024 * 1024 + 1))
    assert "log write error" in errors.read_text()


def test_capture_standard_logging(capsys):
    o = Options()
    o.set_log_callers(DEFAULT_SCOPE_NAME, True)
    o.set_output_level(DEFAULT_SCOPE_NAME, Level.DEBUG)
    configure(o)

    root = logging.getLogger()
    root.error("std-error")
    root.warning("std-warn")
    root.info("std-info")
    root.debug("std-debug")

    default_scope.output_level = Level.NONE
    root.error("std-error-2")
    root.info("std-info-2")

    lines = capsys.readouterr().out.split("\n")
    patterns = [
        TIME + r"\terror\ttests/test_config.py:\d+\tstd-error",
        TIME + r"\twarn\ttests/test_config.py:\d+\tstd-warn",
        TIME + r"\tinfo\ttests/test_config.py:\d+\tstd-info",
        TIME + r"\tdebug\ttests/test_config.py:\d+\tstd-debug",
        "",
    ]
    assert len(lines) == len(patterns)
    for pattern, line in zip(patterns, lines):
        assert re.fullmatch(pattern, line), line


def test_capture_named_logger(capsys):
    configure(Options())
    logging.getLogger("svc").warning("named")
    parts = capsys.readouterr().out.split("\n")[0].split("\t")
    assert parts[1:] == ["warn", "svc", "named"]
    assert re.fullmatch(TIME, parts[0]) is not None


def test_capture_json(capsys):
    configure(Options(json_encoding=True))
    logging.getLogger().info("as-json")
    record = json.loads(capsys.readouterr().out.split("\n")[0])
    assert record["level"] == "info"
    assert record["msg"] == "as-json"
    assert re.fullmatch(TIME, record["time"])


def test_capture_stack_trace(capsys):
    o = Options()
    o.set_stack_trace_level(DEFAULT_SCOPE_NAME, Level.DEBUG)
    o.set_output_level(DEFAULT_SCOPE_NAME, Level.DEBUG)
    configure(o)
    logging.getLogger().info("with-stack")
    out = capsys.readouterr().out
    assert 'File "' in out
    assert "test_config.py" in out