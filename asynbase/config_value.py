"""A typed configuration value: null, bool, int, double, string, array or object."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from asynbase.config_type import ConfigValueType, type_name, type_name_of
from asynbase.exceptions import ConfigKeyNotFoundError, ConfigTypeError

_KIND_BY_TYPE = {
    type(None): ConfigValueType.NULL,
    bool: ConfigValueType.BOOL,
    int: ConfigValueType.INT,
    float: ConfigValueType.DOUBLE,
    str: ConfigValueType.STRING,
    list: ConfigValueType.ARRAY,
    dict: ConfigValueType.OBJECT,
}


def _kind_of(tp) -> ConfigValueType | None:
    """Map a Python type (or a ConfigValueType) to the kind it denotes."""
    if isinstance(tp, ConfigValueType):
        return tp
    if tp is None:
        return ConfigValueType.NULL
    try:
        return _KIND_BY_TYPE.get(tp)
    except TypeError:
        return None


def _expected_name(tp) -> str:
    if isinstance(tp, ConfigValueType):
        return type_name(tp)
    return type_name_of(tp)


class ConfigValue:
    """A configuration value holding exactly one of the supported kinds.

    Arrays hold ``ConfigValue`` items and objects map string keys to
    ``ConfigValue`` items, kept in key order. Plain Python lists and dicts
    given to the constructor are converted recursively.
    """

    __slots__ = ("_kind", "_value")

    def __init__(self, value: Any = None) -> None:
        if isinstance(value, ConfigValue):
            self._kind = value._kind
            self._value = value._value
        elif value is None:
            self._kind, self._value = ConfigValueType.NULL, None
        elif isinstance(value, bool):
            self._kind, self._value = ConfigValueType.BOOL, value
        elif isinstance(value, int):
            self._kind, self._value = ConfigValueType.INT, int(value)
        elif isinstance(value, float):
            self._kind, self._value = ConfigValueType.DOUBLE, float(value)
        elif isinstance(value, str):
            self._kind, self._value = ConfigValueType.STRING, str(value)
        elif isinstance(value, (list, tuple)):
            self._kind = ConfigValueType.ARRAY
            self._value = [ConfigValue(item) for item in value]
        elif isinstance(value, Mapping):
            for key in value:
                if not isinstance(key, str):
                    raise TypeError(f"object keys must be strings, got {type(key).__name__}")
            self._kind = ConfigValueType.OBJECT
            self._value = {key: ConfigValue(value[key]) for key in sorted(value)}
        else:
            raise TypeError(f"unsupported configuration value type: {type(value).__name__}")

    # ------------------------------------------------------------------
    # Type queries
    # ------------------------------------------------------------------

    def value_type(self) -> ConfigValueType:
        """The kind of value held."""
        return self._kind

    def is_type(self, tp) -> bool:
        """Whether the value is of the given Python type or ConfigValueType."""
        return _kind_of(tp) is self._kind

    def is_null(self) -> bool:
        """Whether the value is null."""
        return self._kind is ConfigValueType.NULL

    def empty(self) -> bool:
        """True for null, an empty string, an empty array or an empty object."""
        if self._kind is ConfigValueType.NULL:
            return True
        if self._kind in (ConfigValueType.STRING, ConfigValueType.ARRAY, ConfigValueType.OBJECT):
            return not self._value
        return False

    # ------------------------------------------------------------------
    # Strict access
    # ------------------------------------------------------------------

    def as_type(self, tp):
        """Return the held value, raising ConfigTypeError if the type differs."""
        if _kind_of(tp) is self._kind:
            return self._value
        raise ConfigTypeError("<unknown>", _expected_name(tp), type_name(self._kind))

    def as_bool(self) -> bool:
        return self.as_type(bool)

    def as_int(self) -> int:
        return self.as_type(int)

    def as_double(self) -> float:
        return self.as_type(float)

    def as_string(self) -> str:
        return self.as_type(str)

    def as_array(self) -> list[ConfigValue]:
        return self.as_type(list)

    def as_object(self) -> dict[str, ConfigValue]:
        return self.as_type(dict)

    # ------------------------------------------------------------------
    # Safe access
    # ------------------------------------------------------------------

    def get_as(self, tp):
        """Return a copy of the held value if the type matches, else None."""
        if _kind_of(tp) is not self._kind:
            return None
        if self._kind is ConfigValueType.ARRAY:
            return list(self._value)
        if self._kind is ConfigValueType.OBJECT:
            return dict(self._value)
        return self._value

    def get_bool(self) -> bool | None:
        return self.get_as(bool)

    def get_int(self) -> int | None:
        return self.get_as(int)

    def get_double(self) -> float | None:
        return self.get_as(float)

    def get_string(self) -> str | None:
        return self.get_as(str)

    def get_array(self) -> list[ConfigValue] | None:
        return self.get_as(list)

    def get_object(self) -> dict[str, ConfigValue] | None:
        return self.get_as(dict)

    # ------------------------------------------------------------------
    # Access with defaults
    # ------------------------------------------------------------------

    def value_or(self, default):
        """Return the value if it has the type of ``default``, else ``default``."""
        tp = type(default)
        if _kind_of(tp) is not self._kind:
            return default
        return self.get_as(tp)

    def bool_or(self, default: bool) -> bool:
        return self.value_or(bool(default))

    def int_or(self, default: int) -> int:
        return self.value_or(int(default))

    def double_or(self, default: float) -> float:
        return self.value_or(float(default))

    def string_or(self, default: str) -> str:
        return self.value_or(str(default))

    # ------------------------------------------------------------------
    # Nested access
    # ------------------------------------------------------------------

    def contains(self, key: str) -> bool:
        """Whether this is an object holding ``key``."""
        return self._kind is ConfigValueType.OBJECT and key in self._value

    def __getitem__(self, key) -> ConfigValue:
        if isinstance(key, str):
            obj = self.as_object()
            try:
                return obj[key]
            except KeyError:
                raise ConfigKeyNotFoundError(key) from None
        if isinstance(key, int) and not isinstance(key, bool):
            arr = self.as_array()
            if key < 0 or key >= len(arr):
                raise ConfigKeyNotFoundError(f"[{key}]")
            return arr[key]
        raise TypeError(f"index must be str or int, got {type(key).__name__}")

    def get(self, key: str) -> ConfigValue | None:
        """The member named ``key`` of an object, or None."""
        if self._kind is not ConfigValueType.OBJECT:
            return None
        return self._value.get(key)

    def get_typed(self, key: str, tp):
        """The member ``key`` converted to ``tp``, or None if missing or mistyped."""
        member = self.get(key)
        if member is None:
            return None
        return member.get_as(tp)

    def size(self) -> int:
        """String length or element count; 0 for other kinds."""
        if self._kind in (ConfigValueType.STRING, ConfigValueType.ARRAY, ConfigValueType.OBJECT):
            return len(self._value)
        return 0

    def __len__(self) -> int:
        return self.size()

    # ------------------------------------------------------------------
    # Comparison and display
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConfigValue):
            return NotImplemented
        return self._kind is other._kind and self._value == other._value

    __hash__ = None

    def __repr__(self) -> str:
        return f"ConfigValue({self._value!r})"