"""Integration tests for configuration loading with layered precedence.

Exercises the real load_config() with YAML files, environment variables and
CLI overrides: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from wcoresolver.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "WCORESOLVER_ENVIRONMENT",
        "WCORESOLVER_LOG_LEVEL",
        "WCORESOLVER_BASE_DOMAIN",
        "WCORESOLVER_HTTP_TIMEOUT_SECONDS",
        "WCORESOLVER_RESOLUTION_STRATEGY",
        "WCORESOLVER_BROWSER_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    config = {
        "app_name": "wcoresolver-test",
        "environment": "test",
        "site": {"base_domain": "https://mirror.example/"},
        "http": {"timeout_seconds": 15.0, "max_redirects": 3},
        "playwright": {"headless": False, "poll_interval_ms": 200},
        "resolution": {"strategy": "http", "max_iframe_depth": 1},
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"dir": str(tmp_path / "cache"), "ttl_seconds": 1800},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "wcoresolver"
        assert config.environment == "dev"
        assert config.base_domain == "https://www.wcoflix.tv"
        assert config.http_timeout_seconds == 10.0
        assert config.http_connect_timeout_seconds == 5.0
        assert config.http_max_redirects == 5
        assert "Firefox/146.0" in config.http_user_agent
        assert config.playwright_poll_interval_ms == 300
        assert config.playwright_poll_max_attempts == 100
        assert config.playwright_iframe_settle_attempts == 15
        assert config.resolution_strategy == "auto"
        assert config.browser_enabled is True
        assert config.log_format == "console"
        assert config.cache_ttl_seconds == 30 * 24 * 3600

    def test_prod_derives_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "wcoresolver-test"
        assert config.base_domain == "https://mirror.example"
        assert config.http_timeout_seconds == 15.0
        assert config.http_max_redirects == 3
        assert config.playwright_headless is False
        assert config.playwright_poll_interval_ms == 200
        assert config.resolution_strategy == "http"
        assert config.max_iframe_depth == 1
        assert config.log_level == "DEBUG"
        assert config.cache_dir == tmp_path / "cache"

    def test_partial_yaml_keeps_other_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.dump({"http": {"timeout_seconds": 99.0}}), encoding="utf-8")

        config = load_config(config_path=path)

        assert config.http_timeout_seconds == 99.0
        assert config.http_connect_timeout_seconds == 5.0

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "wcoresolver"

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nope.yaml")


class TestEnvAndCliPrecedence:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WCORESOLVER_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("WCORESOLVER_RESOLUTION_STRATEGY", "browser")

        config = load_config(config_path=yaml_config)

        assert config.log_level == "WARNING"
        assert config.resolution_strategy == "browser"

    def test_cli_overrides_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WCORESOLVER_BASE_DOMAIN", "https://env.example")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"base_domain": "https://cli.example", "log_level": None},
        )

        assert config.base_domain == "https://cli.example"
        assert config.log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("WCORESOLVER_BROWSER_ENABLED=false\n", encoding="utf-8")

        config = load_config(dotenv_path=env_file)
        # load_dotenv writes straight into os.environ.
        monkeypatch.delenv("WCORESOLVER_BROWSER_ENABLED")

        assert config.browser_enabled is False

    def test_missing_dotenv(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"http_timeout_seconds": 0},
            {"http_connect_timeout_seconds": -1},
            {"playwright_poll_interval_ms": 0},
            {"playwright_poll_max_attempts": 0},
            {"max_iframe_depth": -1},
            {"cache_ttl_seconds": -5},
            {"resolution_strategy": "magic"},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            load_config(cli_overrides=overrides)

    def test_no_filesystem_side_effects(self, tmp_path: Path) -> None:
        target = tmp_path / "never-created"
        load_config(cli_overrides={"cache_dir": str(target)})
        assert not target.exists()

    def test_sectioned_dump_roundtrips(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        path = tmp_path / "dump.yaml"
        path.write_text(yaml.dump(config.to_sectioned_dict()), encoding="utf-8")
        assert load_config(config_path=path) == config
