from pathlib import Path

import pytest

from asynbase.config_manager import Config, ConfigLoadResult, ConfigManager
from asynbase.config_value import ConfigValue
from asynbase.exceptions import ConfigKeyNotFoundError, ConfigTypeError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def manager():
    mgr = ConfigManager()
    yield mgr
    mgr.disable_hot_reload()


@pytest.fixture
def config_dir(tmp_path):
    _write(
        tmp_path / "app.yaml",
        "server:\n  port: 8080\n  host: localhost\n  ratio: 0.5\ndebug:\n  enabled: yes\n",
    )
    _write(tmp_path / "sub" / "db.yml", "database:\n  url: db.example.com\n  pool: [1, 2]\n")
    return tmp_path


def test_load_from_directory_flattens_nested_keys(manager, config_dir):
    result = manager.load_from_directory(config_dir)
    assert result
    assert result.success is True
    assert manager.get("server.port").as_int() == 8080
    assert manager.get("server.host").as_string() == "localhost"
    assert manager.get("server.ratio").as_double() == 0.5
    assert manager.get("debug.enabled").as_bool() is True
    assert manager.get("database.url").as_string() == "db.example.com"
    assert manager.get("database.pool") == ConfigValue([1, 2])


def test_loaded_files_and_directory(manager, config_dir):
    result = manager.load_from_directory(config_dir)
    expected = sorted([str(config_dir / "app.yaml"), str(config_dir / "sub" / "db.yml")])
    assert sorted(result.loaded_files) == expected
    assert sorted(manager.loaded_files()) == expected
    assert manager.config_directory() == config_dir
    assert result.failed_files == []
    assert result.errors == []


def test_keys_are_sorted(manager, config_dir):
    manager.load_from_directory(config_dir)
    keys = manager.keys()
    assert keys == sorted(keys)
    assert "server.port" in keys
    assert "database.pool" in keys


def test_non_recursive_skips_subdirectories(manager, config_dir):
    result = manager.load_from_directory(config_dir, recursive=False)
    assert result.success
    assert manager.has("server.port")
    assert not manager.has("database.url")


def test_later_file_overrides_earlier(manager, tmp_path):
    _write(tmp_path / "a.yaml", "k: first\nonly_a: 1\n")
    _write(tmp_path / "b.yaml", "k: second\n")
    manager.load_from_directory(tmp_path)
    assert manager.get_string("k") == "second"
    assert manager.get_int("only_a") == 1


def test_missing_directory_fails(manager, tmp_path):
    missing = tmp_path / "nope"
    result = manager.load_from_directory(missing)
    assert not result
    assert result.errors[0] == f"Configuration directory does not exist: {missing}"


def test_file_instead_of_directory_fails(manager, tmp_path):
    path = _write(tmp_path / "x.yaml", "a: 1\n")
    result = manager.load_from_directory(path)
    assert result.success is False
    assert result.errors == [f"Path is not a directory: {path}"]


def test_empty_directory_succeeds(manager, tmp_path):
    result = manager.load_from_directory(tmp_path)
    assert result.success is True
    assert manager.keys() == []
    assert manager.config_directory() == tmp_path


def test_invalid_yaml_marks_file_failed(manager, tmp_path):
    good = _write(tmp_path / "a.yaml", "good: 1\n")
    bad = _write(tmp_path / "b.yaml", "bad: [1, 2\n")
    result = manager.load_from_directory(tmp_path)
    assert result.success is False
    assert result.failed_files == [str(bad)]
    assert result.loaded_files == [str(good)]
    assert str(bad) in result.errors[-1]
    assert manager.get_int("good") == 1


def test_root_sequence_is_rejected(manager, tmp_path):
    bad = _write(tmp_path / "list.yaml", "- 1\n- 2\n")
    result = manager.load_from_directory(tmp_path)
    assert result.failed_files == [str(bad)]
    assert "sequence" in result.errors[0]


def test_load_files_reports_missing_and_non_yaml(manager, tmp_path):
    good = _write(tmp_path / "ok.yaml", "x: 3\n")
    text = _write(tmp_path / "notes.txt", "x: 4\n")
    missing = tmp_path / "gone.yaml"
    result = manager.load_files([good, text, missing])
    assert result.success is False
    assert result.loaded_files == [str(good)]
    assert result.failed_files == [str(text), str(missing)]
    assert f"Not a YAML file: {text}" in result.errors
    assert f"File does not exist: {missing}" in result.errors
    assert manager.get_int("x") == 3
    assert manager.config_directory() is None


def test_load_files_empty_list_keeps_data(manager, config_dir):
    manager.load_from_directory(config_dir)
    result = manager.load_files([])
    assert result.success is True
    assert manager.get_int("server.port") == 8080


def test_reload_without_directory(manager):
    result = manager.reload()
    assert result.success is False
    assert result.errors == ["No configuration directory set. Call loadFromDirectory first."]


def test_reload_picks_up_changes(manager, tmp_path):
    path = _write(tmp_path / "c.yaml", "value: 1\n")
    manager.load_from_directory(tmp_path)
    _write(path, "value: 2\nextra: on\n")
    result = manager.reload()
    assert result.success is True
    assert manager.get_int("value") == 2
    assert manager.get_bool("extra") is True


def test_get_missing_key_raises(manager):
    with pytest.raises(ConfigKeyNotFoundError) as info:
        manager.get("no.such.key")
    assert info.value.key == "no.such.key"


def test_get_optional(manager, config_dir):
    manager.load_from_directory(config_dir)
    assert manager.get_optional("server.port") == ConfigValue(8080)
    assert manager.get_optional("missing") is None


def test_typed_getters_with_defaults(manager, config_dir):
    manager.load_from_directory(config_dir)
    assert manager.get_as("server.port", int, 1) == 8080
    assert manager.get_as("server.port", str, "fallback") == "fallback"
    assert manager.get_as("missing", int, 7) == 7
    assert manager.get_int("server.host", 5) == 5
    assert manager.get_double("missing") == 0.0
    assert manager.get_string("missing") == ""
    assert manager.get_bool("missing") is False
    assert manager.get_string("server.host", "x") == "localhost"


def test_get_required(manager, config_dir):
    manager.load_from_directory(config_dir)
    assert manager.get_required("server.port", int) == 8080
    with pytest.raises(ConfigTypeError):
        manager.get_required("server.port", str)
    with pytest.raises(ConfigKeyNotFoundError):
        manager.get_required("missing", int)


def test_has_and_contains(manager, config_dir):
    manager.load_from_directory(config_dir)
    assert manager.has("server.port")
    assert "server.host" in manager
    assert "server" not in manager


def test_dump_returns_copy(manager, config_dir):
    manager.load_from_directory(config_dir)
    snapshot = manager.dump()
    assert set(snapshot) == set(manager.keys())
    snapshot.clear()
    assert manager.has("server.port")


def test_clear(manager, config_dir):
    manager.load_from_directory(config_dir)
    manager.clear()
    assert manager.keys() == []
    assert manager.loaded_files() == []
    assert manager.config_directory() is None


def test_validate_required(manager, config_dir):
    manager.load_from_directory(config_dir)
    missing = manager.validate_required(["server.port", "b.missing", "a.missing"])
    assert missing == ["b.missing", "a.missing"]
    assert manager.validate_required(["server.port"]) == []


def test_instance_is_shared():
    first = ConfigManager.instance()
    second = Config.instance()
    assert first is second
    key = "asynbase.tests.never.defined.key"
    assert first.validate_required([key]) == [key]
    assert second.has(key) is False


def test_load_result_truthiness():
    assert not ConfigLoadResult()
    assert ConfigLoadResult(success=True)


def test_hot_reload_requires_directory(manager):
    assert manager.enable_hot_reload() is False
    assert manager.hot_reload_enabled() is False


def test_hot_reload_enable_and_disable(manager, config_dir):
    manager.load_from_directory(config_dir)
    assert manager.enable_hot_reload(debounce_ms=50) is True
    assert manager.hot_reload_enabled() is True
    assert manager.enable_hot_reload() is True
    manager.disable_hot_reload()
    assert manager.hot_reload_enabled() is False