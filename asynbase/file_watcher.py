"""File change watching used for configuration hot reload."""

from __future__ import annotations

import abc
import enum
import os
import sys
import threading
import time
from collections.abc import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class FileChangeEvent(enum.Enum):
    """Kind of change seen on a watched file."""

    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"
    MOVED = "moved"


FileChangeCallback = Callable[[str, FileChangeEvent], None]

_IS_LINUX = sys.platform.startswith("linux")


class FileWatcher(abc.ABC):
    """Interface of a file watcher.

    ``callback`` is called as ``callback(path, event)`` from the watcher's
    own thread. ``debounce_ms`` is the minimum time in milliseconds between
    two reports for the same path.
    """

    def __init__(self) -> None:
        self.callback: FileChangeCallback | None = None
        self.debounce_ms: int = 100

    @abc.abstractmethod
    def start(self) -> bool:
        """Start watching; True on success."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop watching."""

    @abc.abstractmethod
    def add_watch(self, path, recursive: bool = False) -> bool:
        """Watch a file or directory; True on success."""

    @abc.abstractmethod
    def remove_watch(self, path) -> bool:
        """Stop watching a path; False if it was not watched."""

    @abc.abstractmethod
    def is_running(self) -> bool:
        """Whether the watcher is running."""


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: DirectoryWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher._on_event(event)


class DirectoryWatcher(FileWatcher):
    """Watcher reporting completed writes and renames into watched directories.

    A finished write reports MODIFIED, a file renamed into place reports
    CREATED at its new path, and removal of a watched path itself reports
    DELETED. Repeated reports for one path within ``debounce_ms`` are dropped.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._watches: dict[str, bool] = {}
        self._scheduled: dict[str, object] = {}
        self._observer = None
        self._handler = _Handler(self)
        self._last_event: dict[str, float] = {}

    def start(self) -> bool:
        with self._lock:
            if self._observer is not None:
                return True
            observer = Observer()
            scheduled = {}
            try:
                for path, recursive in self._watches.items():
                    scheduled[path] = observer.schedule(self._handler, path, recursive=recursive)
                observer.start()
            except (OSError, RuntimeError):
                return False
            self._scheduled = scheduled
            self._observer = observer
            return True

    def stop(self) -> None:
        with self._lock:
            observer, self._observer = self._observer, None
            self._scheduled = {}
        if observer is None:
            return
        observer.stop()
        observer.join()

    def add_watch(self, path, recursive: bool = False) -> bool:
        abs_path = os.path.abspath(os.fspath(path))
        with self._lock:
            if abs_path in self._watches:
                return True
            if not os.path.exists(abs_path):
                return False
            recursive = bool(recursive) and os.path.isdir(abs_path)
            if self._observer is not None:
                try:
                    self._scheduled[abs_path] = self._observer.schedule(
                        self._handler, abs_path, recursive=recursive
                    )
                except OSError:
                    return False
            self._watches[abs_path] = recursive
        return True

    def remove_watch(self, path) -> bool:
        abs_path = os.path.abspath(os.fspath(path))
        with self._lock:
            if abs_path not in self._watches:
                return False
            del self._watches[abs_path]
            watch = self._scheduled.pop(abs_path, None)
            if watch is not None and self._observer is not None:
                try:
                    self._observer.unschedule(watch)
                except (KeyError, OSError):
                    pass
        return True

    def is_running(self) -> bool:
        return self._observer is not None

    def __enter__(self) -> DirectoryWatcher:
        if not self.start():
            raise OSError("failed to start file watcher")
        return self

    def __exit__(self, *args) -> None:
        self.stop()

    def _classify(self, event: FileSystemEvent) -> tuple[FileChangeEvent, str] | None:
        kind = event.event_type
        src = os.fsdecode(event.src_path)
        if kind == "closed" and not event.is_directory:
            return FileChangeEvent.MODIFIED, src
        # Platforms without close notifications only report modifications.
        if kind == "modified" and not event.is_directory and not _IS_LINUX:
            return FileChangeEvent.MODIFIED, src
        if kind == "moved":
            dest = getattr(event, "dest_path", "")
            if dest:
                return FileChangeEvent.CREATED, os.fsdecode(dest)
            return None
        if kind == "deleted":
            with self._lock:
                watched = src in self._watches
            if watched:
                return FileChangeEvent.DELETED, src
        return None

    def _on_event(self, event: FileSystemEvent) -> None:
        classified = self._classify(event)
        if classified is None:
            return
        change, path = classified
        now = time.monotonic()
        with self._lock:
            last = self._last_event.get(path)
            if last is not None and (now - last) * 1000.0 < self.debounce_ms:
                return
            self._last_event[path] = now
            callback = self.callback
        if callback is None:
            return
        try:
            callback(path, change)
        except Exception:
            # A failing callback must not stop the watcher thread.
            pass


def create_file_watcher() -> FileWatcher:
    """Create the file watcher for the current platform."""
    return DirectoryWatcher()