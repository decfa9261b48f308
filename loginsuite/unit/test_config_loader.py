import pytest
import yaml

from loginsuite.ui_testing.framework.config_loader import (
    ConfigLoader,
    ConfigurationError,
    to_env_key,
)
from loginsuite.ui_testing.framework.credentials import CredentialProvider
from loginsuite.ui_testing.framework.exceptions import HarnessError


def _write(path, data):
    path.write_text(yaml.dump(data), encoding="utf-8")


def test_env_override_and_defaults(monkeypatch, tmp_path):
    _write(tmp_path / "config.yaml", {"ui": {"base_url": "http://example.com", "timeouts": {"default_wait": 10}}})

    loader = ConfigLoader(config_dir=tmp_path, env="dev")
    assert loader.get("ui.base_url") == "http://example.com"
    assert loader.get("ui.retry_count", 3) == 3

    ConfigLoader.reset()
    monkeypatch.setenv("UI_BASE_URL", "http://env.example.com")
    loader = ConfigLoader(config_dir=tmp_path, env="dev")
    assert loader.get("ui.base_url") == "http://env.example.com"


def test_env_overlay_is_deep_merged(tmp_path):
    _write(tmp_path / "config.yaml", {"ui": {"browser": "chrome", "headless": True, "window": {"width": 1920}}})
    _write(tmp_path / "qa.yaml", {"ui": {"headless": False}})

    loader = ConfigLoader(config_dir=tmp_path, env="qa")

    assert loader.get("ui.browser") == "chrome"
    assert loader.get("ui.headless") is False
    assert loader.get("ui.window.width") == 1920
    assert loader.env == "qa"


def test_env_selector_picks_overlay(monkeypatch, tmp_path):
    _write(tmp_path / "config.yaml", {"ui": {"browser": "chrome"}})
    _write(tmp_path / "staging.yaml", {"ui": {"browser": "firefox"}})
    monkeypatch.setenv("UI_ENV", "staging")

    assert ConfigLoader(config_dir=tmp_path).get("ui.browser") == "firefox"


def test_env_values_are_coerced_to_default_type(monkeypatch, tmp_path):
    monkeypatch.setenv("UI_HEADLESS", "false")
    monkeypatch.setenv("UI_TIMEOUTS_DEFAULT_WAIT", "15")
    loader = ConfigLoader(config_dir=tmp_path, env="dev")

    assert loader.get("ui.headless", True) is False
    assert loader.get_int("ui.timeouts.default_wait", 10) == 15
    assert loader.get_bool("ui.headless", True) is False


def test_blank_env_value_does_not_override(monkeypatch, tmp_path):
    _write(tmp_path / "config.yaml", {"login": {"email": "qa@example.com"}})
    monkeypatch.setenv("LOGIN_EMAIL", "   ")

    assert ConfigLoader(config_dir=tmp_path, env="dev").get("login.email") == "qa@example.com"


def test_get_required_names_the_env_var(monkeypatch, tmp_path):
    monkeypatch.delenv("LOGIN_EMAIL", raising=False)
    _write(tmp_path / "config.yaml", {"login": {"email": ""}})
    loader = ConfigLoader(config_dir=tmp_path, env="dev")

    with pytest.raises(ConfigurationError, match="LOGIN_EMAIL"):
        loader.get_required("login.email")
    assert not loader.exists("login.email")


def test_non_numeric_value_raises_configuration_error(tmp_path):
    _write(tmp_path / "config.yaml", {"ui": {"timeouts": {"page_load": "slow"}}})

    with pytest.raises(ConfigurationError):
        ConfigLoader(config_dir=tmp_path, env="dev").get_float("ui.timeouts.page_load", 60.0)


def test_invalid_yaml_raises_configuration_error(tmp_path):
    (tmp_path / "config.yaml").write_text("ui: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigLoader(config_dir=tmp_path, env="dev")


def test_configuration_error_is_a_harness_error(tmp_path):
    (tmp_path / "config.yaml").write_text("ui: [unclosed", encoding="utf-8")

    with pytest.raises(HarnessError):
        ConfigLoader(config_dir=tmp_path, env="dev")


def test_missing_config_file_falls_back_to_defaults(tmp_path):
    loader = ConfigLoader(config_dir=tmp_path / "absent", env="dev")

    assert loader.get("ui.browser", "chrome") == "chrome"
    assert loader.get_section("ui") == {}


def test_reload_updates_values(tmp_path):
    config_path = tmp_path / "config.yaml"
    _write(config_path, {"ui": {"timeouts": {"default_wait": 5}}})

    loader = ConfigLoader(config_dir=tmp_path, env="dev")
    assert loader.get("ui.timeouts.default_wait") == 5

    _write(config_path, {"ui": {"timeouts": {"default_wait": 15}}})
    loader.reload()
    assert loader.get("ui.timeouts.default_wait") == 15


def test_loader_is_a_singleton(tmp_path):
    assert ConfigLoader(config_dir=tmp_path, env="dev") is ConfigLoader()


def test_packaged_config_loads():
    loader = ConfigLoader(env="dev")

    assert loader.get("ui.browser") in ("chrome", "firefox", "safari")
    assert loader.get_section("ui")["timeouts"]["default_wait"] == 10


@pytest.mark.parametrize(
    "key, env_var",
    [
        ("ui.base_url", "UI_BASE_URL"),
        ("ui.teardown.delay_ms", "UI_TEARDOWN_DELAY_MS"),
        ("login.email", "LOGIN_EMAIL"),
    ],
)
def test_to_env_key(key, env_var):
    assert to_env_key(key) == env_var


def test_credentials_come_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("LOGIN_EMAIL", "qa@example.com")
    monkeypatch.setenv("LOGIN_PASSWORD", "Passw0rd!")
    provider = CredentialProvider(ConfigLoader(config_dir=tmp_path, env="dev"))

    assert provider.login_email() == "qa@example.com"
    assert provider.login_password() == "Passw0rd!"


def test_missing_credentials_fail_fast(monkeypatch, tmp_path):
    monkeypatch.delenv("LOGIN_PASSWORD", raising=False)
    provider = CredentialProvider(ConfigLoader(config_dir=tmp_path, env="dev"))

    with pytest.raises(ConfigurationError, match="LOGIN_PASSWORD"):
        provider.login_password()
