# asynbase

Foundation pieces for a server application:

- **Configuration** (`asynbase.config_manager`): loads every `.yaml`/`.yml` file in a
  directory and flattens nested keys into dotted paths such as `server.port`. Lookups are
  typed. A file watcher can reload the configuration when files change.
- **Values** (`asynbase.config_value`): `ConfigValue`, a typed holder for null, bool, int,
  float, str, list or dict.
- **Logging types** (`asynbase.log_common`): log levels, source locations, log events,
  timestamps and ANSI colours.

## Installation

```
pip install asynbase
```

## Configuration

```python
from asynbase.config_manager import ConfigManager

cfg = ConfigManager.instance()
result = cfg.load_from_directory("./config")
if not result:
    for err in result.errors:
        print(err)

port = cfg.get_int("server.port", 8080)
host = cfg.get_string("server.host", "0.0.0.0")
debug = cfg.get_bool("debug.enabled", False)

if "database.url" in cfg:
    url = cfg.get("database.url").as_string()

missing = cfg.validate_required(["server.port", "server.host"])
```

Files are loaded in path order, and a key in a later file replaces the same key from an
earlier one. `load_files([...])` loads an explicit list of files in the order given.
`reload()` loads the last directory again. `keys()`, `dump()`, `loaded_files()`,
`config_directory()` and `clear()` inspect or reset the current configuration.

`ConfigManager.instance()` returns one shared manager per process. `ConfigManager()` creates
an independent one, and `Config` is an alias of `ConfigManager`.

Every load returns a `ConfigLoadResult` with `success`, `loaded_files`, `failed_files`,
`errors` and `timestamp`. The result is truthy only on success. A file that cannot be read,
is not valid YAML, or whose root is not a mapping is listed in `failed_files`, and the other
files still load.

`get(key)` raises `ConfigKeyNotFoundError`. `get_required(key, tp)` also raises
`ConfigTypeError` on a type mismatch. `get_as(key, tp, default)` and the `get_int`,
`get_bool`, `get_double` and `get_string` helpers return the default instead.

How scalar values are typed:

- `true/false`, `yes/no` and `on/off` (any case) become booleans.
- Whole decimal numbers that fit in 64 bits become integers.
- Other text that reads fully as a number, including `inf`, `nan` and hex floats, becomes a float.
- Anything else stays a string, and YAML null stays null.

Sequences become arrays, and maps inside sequences become objects.

The YAML helpers are available on their own in `asynbase.yaml_loader`:
`load_yaml_file(path)`, `scan_yaml_files(directory, recursive)`, `convert_scalar(text)`,
`convert_node(node)` and `flatten(mapping, prefix)`.

### Hot reload

```python
def on_reload(result):
    print("reloaded", len(result.loaded_files), "files")

cfg.enable_hot_reload(on_reload, debounce_ms=500)
...
cfg.disable_hot_reload()
```

A finished write to, or a rename into, a YAML file under the configuration directory starts
a background reload. The callback receives that reload's `ConfigLoadResult`.
`enable_hot_reload` returns `False` if no directory has been loaded or if watching fails.

The watcher can also be used directly:

```python
from asynbase.file_watcher import DirectoryWatcher, FileChangeEvent

watcher = DirectoryWatcher()
watcher.debounce_ms = 200
watcher.callback = lambda path, event: print(path, event)
watcher.add_watch("./config", recursive=True)
with watcher:
    ...
```

`create_file_watcher()` returns the watcher for the current platform.

## Values

`ConfigValue` gives you two ways to read a value:

- Strict accessors (`as_int()`, `as_string()`, `as_type(tp)`, ...) raise `ConfigTypeError` on a type mismatch.
- Lenient accessors (`get_int()`, `get_as(tp)`, `int_or(0)`, `value_or(default)`, ...) return `None` or the default you pass.

```python
from asynbase.config_value import ConfigValue

v = ConfigValue({"name": "svc", "ports": [80, 443]})
v["name"].as_string()          # "svc"
v["ports"][1].as_int()         # 443
v.get_typed("ports", list)     # list of ConfigValue
v.contains("name")             # True
len(v)                         # 2
```

Indexing a missing key, or an index out of range, raises `ConfigKeyNotFoundError`.
`value_type()` returns a `ConfigValueType`. `asynbase.config_type` also provides
`type_name`, `type_name_of`, `is_yaml_file` and `split_key`.

## Errors

`asynbase.exceptions` holds the error classes:

- `Error` is the base class.
- `ConfigError` with its subclasses `ConfigFileError`, `ConfigParseError`,
  `ConfigKeyNotFoundError` (also a `LookupError`), `ConfigTypeError` (also a `TypeError`) and
  `ConfigValidationError`.
- `SystemCallError` and `NetworkError`.

Each error records the source location it was raised from.

## Logging types

```python
from asynbase.log_common import (
    LogEvent, LogLevel, SourceLocation, color_for_level,
    current_timestamp, log_level_from_string, log_level_to_string, thread_id_string,
)

event = LogEvent(LogLevel.WARN, current_timestamp(), thread_id_string(),
                 SourceLocation.current(), "app", "disk almost full")
log_level_to_string(LogLevel.INFO)   # "INFO "
log_level_from_string("DEBUG")       # LogLevel.DEBUG; unknown names give INFO
```

## What the package does not do

The package provides the data types for log records but no loggers and no log output. Nothing
here formats log events or writes them to the console or to files, and nothing sets up
logging from configuration.

## Running the tests

```
pip install -e ".[test]"
pytest
```