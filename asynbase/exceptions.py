"""Exception hierarchy shared by the configuration and logging modules."""

from __future__ import annotations

import os
import sys

from asynbase.log_common import SourceLocation


def _caller_location() -> SourceLocation:
    """Return the location of the first frame outside this module."""
    frame = sys._getframe(1)
    while frame is not None and frame.f_code.co_filename == __file__:
        frame = frame.f_back
    if frame is None:
        return SourceLocation()
    return SourceLocation(frame.f_code.co_filename, frame.f_lineno, frame.f_code.co_name)


class Error(Exception):
    """Base error carrying a message and the source location it was raised from."""

    def __init__(self, message: str, *, location: SourceLocation | None = None) -> None:
        self.message = message
        self.location = location if location is not None else _caller_location()
        super().__init__(self._format(message, self.location))

    @staticmethod
    def _format(message: str, location: SourceLocation) -> str:
        return (
            f"[Exception] {message} "
            f"[{location.file_name or ''}:{location.line} in {location.function_name or ''}]"
        )


class ConfigError(Error):
    """Generic configuration error."""

    def __init__(self, message: str, *, location: SourceLocation | None = None) -> None:
        super().__init__("Config error: " + message, location=location)


class ConfigFileError(ConfigError):
    """A configuration file could not be accessed."""

    def __init__(self, file_path: str, reason: str, *, location: SourceLocation | None = None) -> None:
        self.file_path = str(file_path)
        super().__init__(f"File '{self.file_path}': {reason}", location=location)


class ConfigParseError(ConfigError):
    """A configuration file could not be parsed."""

    def __init__(self, file_path: str, reason: str, *, location: SourceLocation | None = None) -> None:
        self.file_path = str(file_path)
        super().__init__(f"Parse error in '{self.file_path}': {reason}", location=location)


class ConfigKeyNotFoundError(ConfigError, LookupError):
    """A requested configuration key does not exist."""

    def __init__(self, key: str, *, location: SourceLocation | None = None) -> None:
        self.key = key
        super().__init__(f"Configuration key not found: '{key}'", location=location)


class ConfigTypeError(ConfigError, TypeError):
    """A configuration value has a different type than requested."""

    def __init__(
        self,
        key: str,
        expected_type: str,
        actual_type: str,
        *,
        location: SourceLocation | None = None,
    ) -> None:
        self.key = key
        self.expected_type = expected_type
        self.actual_type = actual_type
        super().__init__(
            f"Type mismatch for key '{key}': expected {expected_type}, got {actual_type}",
            location=location,
        )


class ConfigValidationError(ConfigError):
    """A configuration value failed validation."""

    def __init__(self, key: str, reason: str, *, location: SourceLocation | None = None) -> None:
        self.key = key
        super().__init__(f"Validation failed for key '{key}': {reason}", location=location)


class SystemCallError(Error):
    """A system call failed; carries the numeric error code and its description."""

    def __init__(
        self,
        context: str,
        error: int | OSError | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if isinstance(error, OSError):
            code = error.errno or 0
        else:
            code = error or 0
        self.error_code = code
        super().__init__(f"{context}: [{code}] {os.strerror(code)}", location=location)


class NetworkError(SystemCallError):
    """A network operation failed; carries the remote address."""

    def __init__(
        self,
        context: str,
        remote_address: str,
        error: int | OSError | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> None:
        self.remote_address = remote_address
        if error is not None:
            context = f"{context} (remote: {remote_address})"
        super().__init__(context, error, location=location)