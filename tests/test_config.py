"""
Tests for YAML configuration loading.
"""

import pytest

from pylox import LoxConfig, ConfigError, load_config
from pylox import config as config_module


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the real environment and home directory out of the tests."""
    monkeypatch.delenv(config_module.PYLOX_CONFIG, raising=False)
    user_config = tmp_path / "home" / "pylox" / "config.yaml"
    monkeypatch.setattr(config_module, "_user_config_path", lambda: user_config)
    return user_config


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    """Test built-in defaults."""

    def test_no_file_gives_defaults(self):
        config = load_config()
        assert config == LoxConfig()
        assert config.show_source is True
        assert config.max_errors == 20
        assert config.prompt == "> "
        assert config.log_level == "WARNING"
        assert config.echo_tokens is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = write(tmp_path / "empty.yaml", "")
        assert load_config(path) == LoxConfig()


class TestSearchOrder:
    """Explicit path, then PYLOX_CONFIG, then the user config file."""

    def test_explicit_path(self, tmp_path):
        path = write(tmp_path / "c.yaml", "show_source: false\nmax_errors: 5\n")
        config = load_config(path)
        assert config.show_source is False
        assert config.max_errors == 5

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = write(tmp_path / "env.yaml", 'prompt: "lox> "\n')
        monkeypatch.setenv(config_module.PYLOX_CONFIG, str(path))
        assert load_config().prompt == "lox> "

    def test_user_config(self, isolated_config):
        write(isolated_config, "echo_tokens: true\n")
        assert load_config().echo_tokens is True

    def test_explicit_beats_environment(self, tmp_path, monkeypatch):
        env_path = write(tmp_path / "env.yaml", "max_errors: 3\n")
        explicit = write(tmp_path / "explicit.yaml", "max_errors: 7\n")
        monkeypatch.setenv(config_module.PYLOX_CONFIG, str(env_path))
        assert load_config(explicit).max_errors == 7

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_missing_environment_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(config_module.PYLOX_CONFIG, str(tmp_path / "nope.yaml"))
        with pytest.raises(ConfigError, match="PYLOX_CONFIG"):
            load_config()


class TestValidation:
    """Unknown keys and wrong types are rejected."""

    def test_unknown_key(self, tmp_path):
        path = write(tmp_path / "c.yaml", "colour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_config(path)

    def test_wrong_type(self, tmp_path):
        path = write(tmp_path / "c.yaml", "max_errors: five\n")
        with pytest.raises(ConfigError, match="max_errors"):
            load_config(path)

    def test_bool_is_not_int(self, tmp_path):
        path = write(tmp_path / "c.yaml", "max_errors: true\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_int_is_not_bool(self, tmp_path):
        path = write(tmp_path / "c.yaml", "show_source: 1\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_log_level_normalized(self, tmp_path):
        path = write(tmp_path / "c.yaml", "log_level: debug\n")
        assert load_config(path).log_level == "DEBUG"

    def test_bad_log_level(self, tmp_path):
        path = write(tmp_path / "c.yaml", "log_level: LOUD\n")
        with pytest.raises(ConfigError, match="log_level"):
            load_config(path)

    def test_max_errors_positive(self, tmp_path):
        path = write(tmp_path / "c.yaml", "max_errors: 0\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = write(tmp_path / "c.yaml", "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = write(tmp_path / "c.yaml", "a: [1, 2\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_from_dict(self):
        config = LoxConfig.from_dict({"prompt": ">> "})
        assert config.prompt == ">> "
        assert config.max_errors == 20
