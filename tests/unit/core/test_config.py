"""Unit tests for application settings."""

import pytest

from autojson.core.config import JsonConfig, LogConfig, Settings, get_settings


@pytest.mark.unit
class TestSettings:
    """Test Settings defaults and environment overrides."""

    def test_defaults(self) -> None:
        """Defaults describe a development instance."""
        settings = Settings()

        assert settings.app_name == "AutoJSON"
        assert settings.environment == "development"
        assert settings.default_media_type == "text/html"
        assert settings.json_config == JsonConfig()
        assert settings.log_config.log_formatter_type == "console"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables, nested ones included, override defaults."""
        monkeypatch.setenv("APP_NAME", "Orders")
        monkeypatch.setenv("JSON_CONFIG__SORT_KEYS", "true")
        monkeypatch.setenv("LOG_CONFIG__LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DEFAULT_MEDIA_TYPE", "text/plain")

        settings = Settings()

        assert settings.app_name == "Orders"
        assert settings.json_config.sort_keys is True
        assert settings.log_config.log_level == "DEBUG"
        assert settings.default_media_type == "text/plain"

    @pytest.mark.parametrize(
        ("environment", "cloud_var", "expected"),
        [
            ("development", None, "console"),
            ("production", None, "json"),
            ("staging", None, "json"),
            ("development", "K_SERVICE", "json"),
            ("development", "AWS_EXECUTION_ENV", "json"),
        ],
    )
    def test_formatter_detection(
        self,
        monkeypatch: pytest.MonkeyPatch,
        environment: str,
        cloud_var: str | None,
        expected: str,
    ) -> None:
        """The log formatter is auto-detected when not configured."""
        monkeypatch.delenv("K_SERVICE", raising=False)
        monkeypatch.delenv("AWS_EXECUTION_ENV", raising=False)
        if cloud_var:
            monkeypatch.setenv(cloud_var, "1")
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert Settings().log_config.log_formatter_type == expected

    def test_explicit_formatter_kept(self) -> None:
        """An explicit formatter is never overridden."""
        settings = Settings(
            environment="production",
            log_config=LogConfig(log_formatter_type="console"),
        )

        assert settings.log_config.log_formatter_type == "console"

    def test_empty_docs_url_disables_docs(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Empty strings become None for documentation URLs."""
        monkeypatch.setenv("DOCS_URL", "")

        assert Settings().docs_url is None

    def test_get_settings_cached(self) -> None:
        """get_settings returns one shared instance."""
        assert get_settings() is get_settings()
