"""Reading YAML files into flat maps of dotted keys to configuration values."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

import yaml

from asynbase.config_type import is_yaml_file
from asynbase.config_value import ConfigValue
from asynbase.exceptions import ConfigFileError, ConfigParseError

_NULL_TAG = "tag:yaml.org,2002:null"

_BOOL_WORDS = {
    "true": True,
    "yes": True,
    "on": True,
    "false": False,
    "no": False,
    "off": False,
}

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_WS = "[ \t\n\v\f\r]*"
_INT_RE = re.compile(_WS + r"[+-]?[0-9]+")
_DEC_FLOAT_RE = re.compile(
    _WS + r"([+-]?)((?:[0-9]+\.?[0-9]*|\.[0-9]+))((?:[eE][+-]?[0-9]+)?)"
)
_HEX_FLOAT_RE = re.compile(
    _WS + r"([+-]?)0[xX]((?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+))((?:[pP][+-]?[0-9]+)?)"
)
_SPECIAL_FLOAT_RE = re.compile(
    _WS + r"([+-]?)(inf(?:inity)?|nan(?:\([0-9A-Za-z_]*\))?)", re.IGNORECASE
)


def _in_range(value: float, mantissa: str, nonzero: str) -> bool:
    """Reject results that overflow or underflow a double."""
    if value in (float("inf"), float("-inf")):
        return False
    if value == 0.0:
        return re.search(nonzero, mantissa) is None
    return abs(value) >= sys.float_info.min


def _parse_float(text: str) -> float | None:
    match = _DEC_FLOAT_RE.fullmatch(text)
    if match:
        sign, mantissa, exponent = match.groups()
        value = float(sign + mantissa + exponent)
        return value if _in_range(value, mantissa, "[1-9]") else None
    match = _HEX_FLOAT_RE.fullmatch(text)
    if match:
        sign, mantissa, exponent = match.groups()
        try:
            value = float.fromhex(f"{sign}0x{mantissa}{exponent}")
        except OverflowError:
            return None
        return value if _in_range(value, mantissa, "[1-9a-fA-F]") else None
    match = _SPECIAL_FLOAT_RE.fullmatch(text)
    if match:
        sign, word = match.groups()
        base = "nan" if word.lower().startswith("nan") else "inf"
        return float(sign + base)
    return None


def convert_scalar(text: str) -> ConfigValue:
    """Convert scalar text to a bool, int, double or string value.

    Booleans are true/false, yes/no and on/off in any case; integers must fit
    in 64 bits; anything else that reads fully as a number is a double.
    """
    if len(text) <= 5:
        flag = _BOOL_WORDS.get(text.lower())
        if flag is not None:
            return ConfigValue(flag)
    # An empty scalar reads as the number zero, as a C integer parse gives.
    if text == "":
        return ConfigValue(0)
    if _INT_RE.fullmatch(text):
        number = int(text.strip(" \t\n\v\f\r"))
        if _INT64_MIN <= number <= _INT64_MAX:
            return ConfigValue(number)
    number = _parse_float(text)
    if number is not None:
        return ConfigValue(number)
    return ConfigValue(text)


def _key_text(node: yaml.Node) -> str:
    if not isinstance(node, yaml.ScalarNode):
        raise ValueError("mapping keys must be scalars")
    return node.value


def convert_node(node: yaml.Node) -> ConfigValue:
    """Convert a composed YAML node to a configuration value."""
    if isinstance(node, yaml.ScalarNode):
        if node.tag == _NULL_TAG:
            return ConfigValue(None)
        return convert_scalar(node.value)
    if isinstance(node, yaml.SequenceNode):
        return ConfigValue([convert_node(item) for item in node.value])
    if isinstance(node, yaml.MappingNode):
        obj: dict[str, ConfigValue] = {}
        for key_node, value_node in node.value:
            obj[_key_text(key_node)] = convert_node(value_node)
        return ConfigValue(obj)
    return ConfigValue(None)


def flatten(mapping: yaml.Node, prefix: str = "") -> dict[str, ConfigValue]:
    """Flatten nested YAML mappings into dotted keys; later keys win."""
    values: dict[str, ConfigValue] = {}
    if not isinstance(mapping, yaml.MappingNode):
        return values
    for key_node, value_node in mapping.value:
        key = _key_text(key_node)
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value_node, yaml.MappingNode):
            values.update(flatten(value_node, full_key))
        else:
            values[full_key] = convert_node(value_node)
    return values


def _describe(node: yaml.Node) -> str:
    if isinstance(node, yaml.SequenceNode):
        return "sequence"
    if isinstance(node, yaml.ScalarNode):
        return "scalar"
    return "null"


def load_yaml_file(file_path) -> dict[str, ConfigValue]:
    """Read the first document of a YAML file as a flat map of values.

    An empty file gives an empty map. Raises ConfigFileError when the file
    cannot be read or its root is not a mapping, ConfigParseError when it is
    not valid YAML.
    """
    path = os.fspath(file_path)
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigFileError(path, f"Cannot open file: {exc.strerror or exc}") from exc

    loader = yaml.SafeLoader(data)
    try:
        root = loader.get_node() if loader.check_node() else None
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        problem = exc.problem or exc.context or str(exc)
        if mark is not None:
            problem = f"{problem} at line {mark.line + 1}, column {mark.column + 1}"
        raise ConfigParseError(path, problem) from exc
    except yaml.YAMLError as exc:
        raise ConfigParseError(path, str(exc)) from exc
    finally:
        loader.dispose()

    if root is None or (isinstance(root, yaml.ScalarNode) and root.tag == _NULL_TAG):
        return {}
    if not isinstance(root, yaml.MappingNode):
        raise ConfigFileError(path, f"Root node must be a map, got {_describe(root)}")
    try:
        return flatten(root)
    except (ValueError, TypeError) as exc:
        raise ConfigFileError(path, f"Unexpected error: {exc}") from exc


def scan_yaml_files(directory, recursive: bool = True) -> list[Path]:
    """List the YAML files in a directory, sorted by path.

    Unreadable or missing directories give what could be listed, possibly
    nothing.
    """
    root = Path(directory)
    found: list[Path] = []
    if recursive:
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                candidate = Path(dirpath) / name
                if is_yaml_file(name) and candidate.is_file():
                    found.append(candidate)
    else:
        try:
            entries = list(root.iterdir())
        except OSError:
            return []
        found = [entry for entry in entries if is_yaml_file(entry.name) and entry.is_file()]
    return sorted(found, key=lambda p: p.parts)