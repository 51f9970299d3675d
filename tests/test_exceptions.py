import errno
import os
import sys

import pytest

from asynbase.exceptions import (
    ConfigError,
    ConfigFileError,
    ConfigKeyNotFoundError,
    ConfigParseError,
    ConfigTypeError,
    ConfigValidationError,
    Error,
    NetworkError,
    SystemCallError,
)
from asynbase.log_common import SourceLocation


def test_error_captures_caller_location():
    line = sys._getframe().f_lineno + 1
    err = Error("boom")
    assert err.location.line == line
    assert err.location.function_name == "test_error_captures_caller_location"
    assert err.location.file_name == __file__


def test_error_message_format():
    err = Error("boom")
    loc = err.location
    assert str(err) == f"[Exception] boom [{loc.file_name}:{loc.line} in {loc.function_name}]"
    assert err.message == "boom"


def test_explicit_location():
    loc = SourceLocation("x.py", 7, "fn")
    err = Error("m", location=loc)
    assert err.location == loc
    assert str(err) == "[Exception] m [x.py:7 in fn]"


def test_subclass_location_points_at_caller():
    err = ConfigKeyNotFoundError("a.b")
    assert err.location.file_name == __file__
    assert err.location.function_name == "test_subclass_location_points_at_caller"


def test_config_error_prefix():
    err = ConfigError("oops")
    assert err.message == "Config error: oops"
    assert isinstance(err, Error)


def test_config_file_error():
    err = ConfigFileError("/etc/app.yaml", "missing")
    assert err.file_path == "/etc/app.yaml"
    assert err.message == "Config error: File '/etc/app.yaml': missing"


def test_config_parse_error():
    err = ConfigParseError("cfg.yml", "bad indent")
    assert err.file_path == "cfg.yml"
    assert "Parse error in 'cfg.yml': bad indent" in str(err)


def test_key_not_found_error():
    err = ConfigKeyNotFoundError("server.port")
    assert err.key == "server.port"
    assert "Configuration key not found: 'server.port'" in str(err)
    with pytest.raises(LookupError):
        raise err


def test_type_error_fields():
    err = ConfigTypeError("port", "int", "string")
    assert (err.key, err.expected_type, err.actual_type) == ("port", "int", "string")
    assert "Type mismatch for key 'port': expected int, got string" in err.message
    assert isinstance(err, TypeError)
    assert isinstance(err, ConfigError)


def test_validation_error():
    err = ConfigValidationError("timeout", "must be positive")
    assert err.key == "timeout"
    assert "Validation failed for key 'timeout': must be positive" in err.message


def test_system_call_error_from_code():
    err = SystemCallError("open", errno.ENOENT)
    assert err.error_code == errno.ENOENT
    assert err.message == f"open: [{errno.ENOENT}] {os.strerror(errno.ENOENT)}"


def test_system_call_error_from_oserror():
    err = SystemCallError("read", OSError(errno.EACCES, "denied"))
    assert err.error_code == errno.EACCES


def test_network_error_with_code_appends_remote():
    err = NetworkError("connect", "10.0.0.1:80", errno.ECONNREFUSED)
    assert err.remote_address == "10.0.0.1:80"
    assert err.error_code == errno.ECONNREFUSED
    assert err.message.startswith("connect (remote: 10.0.0.1:80): ")
    assert isinstance(err, SystemCallError)


def test_network_error_without_code_keeps_context():
    err = NetworkError("accept", "peer")
    assert err.remote_address == "peer"
    assert err.error_code == 0
    assert err.message.startswith("accept: [0] ")