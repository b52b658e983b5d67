# scopelog

Scoped logging for Python applications. Code is grouped into named
*scopes*. Each scope has its own output level, its own stack-trace level
and its own setting for whether the caller's source location is logged.
Output goes to stdout, stderr, plain files or a rotating log file. Each
entry is written either as tab-separated console text or as one JSON
object per line.

The package uses only the standard library.

## Installation

```
pip install scopelog
```

## Levels

`scopelog.levels.Level` is an `IntEnum` with these levels, from quietest to
most verbose: `NONE`, `FATAL`, `ERROR`, `WARN`, `INFO`, `DEBUG`. A scope
writes a message when the scope's output level is at least the level of the
message. `str(Level.WARN)` gives `"warn"`.

- `string_to_level("Debug")` looks up a level by name. Case does not
  matter. An unknown name raises `ValueError`.
- `convert_scoped_level("myscope:warn")` returns `("myscope", Level.WARN)`.
  An entry with no scope part belongs to the `default` scope. A malformed
  entry or an unknown level raises `ValueError`.

## Scopes

```python
from scopelog.scope import register_scope, find_scope, scopes

db = register_scope("db", "Database access", 0)
db.info("connected", host="db.example.com")
db.debugf("query took %d ms", 12)
db.warna("retrying ", 3, " times")

if db.debug_enabled():
    db.debug("expensive detail")

assert find_scope("db") is db
assert "db" in scopes()
```

`register_scope` returns the existing scope if the name is already
registered. A name that contains a colon, comma or period raises
`ValueError`. `find_scope` returns `None` for a name that was never
registered. `scopes()` returns a snapshot dictionary of all scopes.

Every scope has these attributes, which can be changed at any time:
`output_level` (default `Level.INFO`), `stack_trace_level` (default
`Level.NONE`) and `log_callers` (default `False`). `name` and `description`
are read-only.

Each level has four methods:

- `info(msg, **fields)` logs a message. Keyword arguments are attached as
  structured fields.
- `infof(template, *args)` formats the message with `%`-style formatting.
  With no arguments the template is logged unchanged.
- `infoa(*args)` joins the arguments into one message. A space is put
  between two neighbouring arguments when neither is a string.
- `info_enabled()` tells whether the level is currently written.

The same set exists for `fatal`, `error`, `warn` and `debug`. A `fatal`
message is only logged; it does not end the process.

Stack traces are attached to scope messages when the scope's
`stack_trace_level` is at least `ERROR` for warn, info and debug messages,
or at least the message's own level for fatal and error messages.

Nothing is written until the logging system has been configured, which
happens when `scopelog.config` or `scopelog.default` is imported.

## Configuring output

```python
from scopelog.config import configure, sync
from scopelog.levels import Level
from scopelog.options import Options

options = Options()
options.output_paths = ["stdout"]
options.rotate_output_path = "/var/log/myapp/app.log"
options.json_encoding = True
options.set_output_level("default", Level.DEBUG)
options.set_stack_trace_level("default", Level.ERROR)
options.set_log_callers("default", True)

configure(options)
...
sync()  # flush buffered entries before exiting
```

`Options` is a dataclass with these fields and defaults:

| field | default |
|---|---|
| `output_paths` | `["stdout"]` |
| `error_output_paths` | `["stderr"]` |
| `rotate_output_path` | `""` (no rotating file) |
| `rotation_max_size` | `104857600` (megabytes) |
| `rotation_max_age` | `30` (days) |
| `rotation_max_backups` | `1000` |
| `json_encoding` | `False` |
| `log_grpc` | `True` |
| `output_levels` | `"default:info"` |
| `stack_trace_levels` | `"default:none"` |
| `log_callers` | `""` |

`output_levels` and `stack_trace_levels` are comma-separated `[scope:]level`
entries, and `log_callers` is a comma-separated list of scope names. The
`set_*`/`get_*` methods on `Options` edit and read these strings.
`get_output_level` and `get_stack_trace_level` raise `ValueError` when no
valid level is defined for the scope.

`configure(options)` opens the outputs and applies the levels and caller
settings to the registered scopes. It raises `ValueError` for a malformed
level entry or an unknown scope, and `OSError` when an output path cannot be
opened. If it fails, the previous configuration stays in effect. `stdout`
and `stderr` in the path lists stand for the standard streams. Any other
entry is a file that is opened for appending. Write errors are reported to
the error output paths.

The rotating file is renamed to a timestamped backup next to it once it
would grow beyond `rotation_max_size` megabytes (`0` means 100). Backups
beyond `rotation_max_backups` or older than `rotation_max_age` days are
deleted. Set either of these to `0` to turn that limit off.

`configure` also installs a handler on the standard library's root logger.
Records from `logging` are then written through the same output, filtered
by the `default` scope's output level.

Timestamps are written in UTC with microseconds, for example
`2017-01-01T01:01:01.000999Z`. `scopelog.config.format_date(t)` produces
this format. A naive datetime is treated as UTC.

A console line has the timestamp, level, scope name (left out for the
default scope), caller and message, separated by tabs. Any fields follow as
JSON, and a stack trace goes on the following lines. A JSON line has the
keys `level`, `time`, `scope`, `caller`, `msg`, then the fields, then
`stack`.

`scopelog.config.Config` is a small dataclass (`set_log_callers`,
`stack_trace_level`, `output_level`) for holding settings read from a
configuration file.

## Command-line flags

`Options.attach_flags(parser)` adds the logging flags to an
`argparse.ArgumentParser`. The defaults are taken from the options. Parse
with `parser.parse_args(argv, namespace=options)` to store the values in
the options:

- `--log_target` (may be repeated; replaces the default list)
- `--log_rotate`
- `--log_rotate_max_age`
- `--log_rotate_max_size`
- `--log_rotate_max_backups`
- `--log_as_json`
- `--log_output_level`
- `--log_stacktrace_level`
- `--log_caller`

## Logging without a scope

The `scopelog.default` module logs through the built-in `default` scope.
Importing it installs the default configuration: info level, written to
stdout.

```python
from scopelog import default as log

log.info("service started")
log.errorf("failed after %d attempts", 3)
log.debuga("value=", 42)
```

It has the same four functions per level as a scope, for example `info`,
`infof`, `infoa` and `info_enabled`. These functions attach a stack trace
when the default scope's `stack_trace_level` is at least the message's
level.

## Limitations

- The package provides no command-line program. It only adds flags to your
  own parser.
- `Options.log_grpc` is accepted but has no effect. Only the standard
  library's `logging` module is captured.