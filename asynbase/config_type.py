"""Basic configuration value types and small helpers."""

from __future__ import annotations

import os
from enum import IntEnum


class ConfigValueType(IntEnum):
    """Kinds of value a configuration entry can hold."""

    NULL = 0
    BOOL = 1
    INT = 2
    DOUBLE = 3
    STRING = 4
    ARRAY = 5
    OBJECT = 6


_TYPE_NAMES = {
    ConfigValueType.NULL: "null",
    ConfigValueType.BOOL: "bool",
    ConfigValueType.INT: "int",
    ConfigValueType.DOUBLE: "double",
    ConfigValueType.STRING: "string",
    ConfigValueType.ARRAY: "array",
    ConfigValueType.OBJECT: "object",
}

_PY_TYPE_NAMES = {
    bool: "bool",
    int: "int",
    float: "double",
    str: "string",
    type(None): "null",
    list: "array",
    dict: "object",
}


def type_name(value_type) -> str:
    """Return the readable name of a value type, or "unknown"."""
    try:
        return _TYPE_NAMES[ConfigValueType(value_type)]
    except (ValueError, TypeError):
        return "unknown"


def type_name_of(tp) -> str:
    """Return the configuration type name for a Python type."""
    if tp is None:
        return "null"
    name = _PY_TYPE_NAMES.get(tp)
    if name is not None:
        return name
    return getattr(tp, "__name__", str(tp))


def is_yaml_file(file_path) -> bool:
    """Tell whether a path ends in .yaml or .yml."""
    return os.fspath(file_path).endswith((".yaml", ".yml"))


def split_key(key: str, delimiter: str = ".") -> list[str]:
    """Split a key on a single-character delimiter, dropping empty parts."""
    if len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")
    return [part for part in key.split(delimiter) if part]