"""Configuration manager: loads YAML files into a flat, dotted-key store."""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from asynbase.config_type import is_yaml_file
from asynbase.config_value import ConfigValue
from asynbase.exceptions import ConfigError, ConfigKeyNotFoundError
from asynbase.file_watcher import FileChangeEvent, FileWatcher, create_file_watcher
from asynbase.yaml_loader import load_yaml_file, scan_yaml_files


@dataclass
class ConfigLoadResult:
    """Outcome of a load or reload."""

    success: bool = False
    loaded_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.monotonic)

    def __bool__(self) -> bool:
        return self.success


HotReloadCallback = Callable[[ConfigLoadResult], None]


@dataclass(frozen=True)
class _ConfigData:
    """An immutable snapshot of the loaded configuration."""

    values: dict[str, ConfigValue] = field(default_factory=dict)
    loaded_files: tuple[str, ...] = ()
    config_dir: Path | None = None
    load_time: float = 0.0


def _load_into(path: Path, values: dict[str, ConfigValue], result: ConfigLoadResult) -> None:
    """Merge one YAML file into ``values`` and record the outcome in ``result``."""
    path_text = str(path)
    try:
        values.update(load_yaml_file(path))
    except ConfigError as exc:
        result.errors.append(exc.message)
        result.failed_files.append(path_text)
        return
    except Exception as exc:  # noqa: BLE001 - any failure marks only this file as failed
        result.errors.append(f"Unexpected error loading '{path_text}': {exc}")
        result.failed_files.append(path_text)
        return
    result.loaded_files.append(path_text)


class ConfigManager:
    """Holds configuration loaded from YAML files under dotted keys.

    Nested mappings are flattened, so ``server: {port: 8080}`` is read with
    ``get("server.port")``. Each load swaps in a new immutable snapshot, so
    readers never see a half-built configuration. ``instance()`` returns the
    process-wide manager; separate managers may also be created directly.
    """

    _instance: ConfigManager | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._data = _ConfigData()
        self._reload_lock = threading.Lock()
        self._file_watcher: FileWatcher | None = None
        self._hot_reload_callback: HotReloadCallback | None = None
        self._hot_reload_enabled = False
        self._reload_pending = False
        self._pending_lock = threading.Lock()
        self._reload_threads: list[threading.Thread] = []
        self._threads_lock = threading.Lock()

    @classmethod
    def instance(cls) -> ConfigManager:
        """The shared manager of this process."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_from_directory(self, config_dir, recursive: bool = True) -> ConfigLoadResult:
        """Load every .yaml/.yml file of a directory, in path order."""
        return self._load_directory(Path(os.fspath(config_dir)), recursive)

    def load_files(self, file_paths: Iterable) -> ConfigLoadResult:
        """Load the given YAML files, in the given order."""
        result = ConfigLoadResult()
        paths = [Path(os.fspath(p)) for p in file_paths]
        if not paths:
            result.success = True
            return result

        values: dict[str, ConfigValue] = {}
        for path in paths:
            if not path.exists():
                result.failed_files.append(str(path))
                result.errors.append(f"File does not exist: {path}")
                continue
            if not is_yaml_file(path):
                result.failed_files.append(str(path))
                result.errors.append(f"Not a YAML file: {path}")
                continue
            _load_into(path, values, result)

        self._commit(values, result.loaded_files, result.timestamp, None)
        result.success = not result.failed_files
        return result

    def reload(self) -> ConfigLoadResult:
        """Load the current configuration directory again."""
        if self._data.config_dir is None:
            result = ConfigLoadResult()
            result.errors.append("No configuration directory set. Call loadFromDirectory first.")
            return result
        return self._do_reload()

    # ------------------------------------------------------------------
    # Hot reload
    # ------------------------------------------------------------------

    def enable_hot_reload(
        self, callback: HotReloadCallback | None = None, debounce_ms: int = 500
    ) -> bool:
        """Reload automatically when a YAML file in the directory changes.

        Returns False when no directory has been loaded or watching fails.
        """
        if self._hot_reload_enabled:
            return True
        config_dir = self._data.config_dir
        if config_dir is None:
            return False
        try:
            watcher = create_file_watcher()
            self._hot_reload_callback = callback
            watcher.debounce_ms = debounce_ms
            watcher.callback = self._handle_file_change
            self._file_watcher = watcher
            if not watcher.add_watch(config_dir, True):
                return False
            if not watcher.start():
                return False
        except Exception:  # noqa: BLE001 - report failure instead of raising
            return False
        self._hot_reload_enabled = True
        return True

    def disable_hot_reload(self) -> None:
        """Stop watching and wait for reloads in progress."""
        if not self._hot_reload_enabled:
            return
        self._hot_reload_enabled = False
        with self._threads_lock:
            threads, self._reload_threads = self._reload_threads, []
        for thread in threads:
            thread.join()
        watcher, self._file_watcher = self._file_watcher, None
        if watcher is not None:
            watcher.stop()

    def hot_reload_enabled(self) -> bool:
        """Whether hot reload is on."""
        return self._hot_reload_enabled

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str) -> ConfigValue:
        """The value of ``key``; raises ConfigKeyNotFoundError if missing."""
        try:
            return self._data.values[key]
        except KeyError:
            raise ConfigKeyNotFoundError(key) from None

    def get_optional(self, key: str) -> ConfigValue | None:
        """The value of ``key``, or None."""
        return self._data.values.get(key)

    def get_as(self, key: str, tp, default=None):
        """The value of ``key`` as ``tp``; ``default`` if missing or mistyped."""
        value = self.get_optional(key)
        if value is None:
            return default
        typed = value.get_as(tp)
        return default if typed is None else typed

    def get_required(self, key: str, tp):
        """The value of ``key`` as ``tp``; raises if missing or mistyped."""
        return self.get(key).as_type(tp)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self.get_as(key, bool, default)

    def get_int(self, key: str, default: int = 0) -> int:
        return self.get_as(key, int, default)

    def get_double(self, key: str, default: float = 0.0) -> float:
        return self.get_as(key, float, default)

    def get_string(self, key: str, default: str = "") -> str:
        return self.get_as(key, str, default)

    def has(self, key: str) -> bool:
        """Whether ``key`` is present."""
        return key in self._data.values

    def __contains__(self, key) -> bool:
        return self.has(key)

    def keys(self) -> list[str]:
        """All keys, sorted."""
        return sorted(self._data.values)

    def dump(self) -> dict[str, ConfigValue]:
        """A copy of all key/value pairs."""
        return dict(self._data.values)

    def loaded_files(self) -> list[str]:
        """The files the current configuration was built from."""
        return list(self._data.loaded_files)

    def config_directory(self) -> Path | None:
        """The directory last loaded, or None."""
        return self._data.config_dir

    def clear(self) -> None:
        """Drop all configuration, including the directory."""
        self._data = _ConfigData()

    def validate_required(self, required_keys: Iterable[str]) -> list[str]:
        """The keys of ``required_keys`` that are missing, in order."""
        values = self._data.values
        return [key for key in required_keys if key not in values]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_directory(self, config_dir: Path, recursive: bool) -> ConfigLoadResult:
        result = ConfigLoadResult()
        if not config_dir.exists():
            result.errors.append(f"Configuration directory does not exist: {config_dir}")
            return result
        if not config_dir.is_dir():
            result.errors.append(f"Path is not a directory: {config_dir}")
            return result

        values: dict[str, ConfigValue] = {}
        for path in scan_yaml_files(config_dir, recursive):
            _load_into(path, values, result)

        self._commit(values, result.loaded_files, result.timestamp, config_dir)
        result.success = not result.failed_files
        return result

    def _commit(
        self,
        values: dict[str, ConfigValue],
        loaded_files: list[str],
        timestamp: float,
        config_dir: Path | None,
    ) -> None:
        self._data = _ConfigData(values, tuple(loaded_files), config_dir, timestamp)

    def _do_reload(self) -> ConfigLoadResult:
        with self._reload_lock:
            config_dir = self._data.config_dir
            if config_dir is None:
                result = ConfigLoadResult()
                result.errors.append("No configuration directory set. Call loadFromDirectory first.")
                return result
            return self._load_directory(config_dir, True)

    def _handle_file_change(self, file_path: str, event: FileChangeEvent) -> None:
        if not is_yaml_file(file_path):
            return
        if event not in (FileChangeEvent.MODIFIED, FileChangeEvent.CREATED):
            return
        with self._pending_lock:
            if self._reload_pending:
                return
            self._reload_pending = True

        thread = threading.Thread(target=self._background_reload, daemon=True)
        with self._threads_lock:
            self._reload_threads = [t for t in self._reload_threads if t.is_alive()]
            self._reload_threads.append(thread)
            thread.start()

    def _background_reload(self) -> None:
        try:
            if not self._hot_reload_enabled:
                return
            result = self._do_reload()
            callback = self._hot_reload_callback
            if callback is not None:
                callback(result)
        finally:
            with self._pending_lock:
                self._reload_pending = False


Config = ConfigManager