"""Unit tests for environment settings."""

from pathlib import Path

import pytest

from winnipeg_transit.settings.app import AppSettings, get_settings
from winnipeg_transit.transport.client import TransitClient
from winnipeg_transit.transport.constants import DEFAULT_BASE_URL
from winnipeg_transit.transport.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run without a .env file and without TRANSIT_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "TRANSIT_API_KEY",
        "TRANSIT_BASE_URL",
        "TRANSIT_USER_AGENT",
        "TRANSIT_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self) -> None:
        """Without environment the public endpoint is used and no key is set."""
        settings = get_settings()

        assert settings.api_key is None
        assert settings.base_url == DEFAULT_BASE_URL

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """TRANSIT_* variables populate the settings."""
        monkeypatch.setenv("TRANSIT_API_KEY", "env-key")
        monkeypatch.setenv("TRANSIT_BASE_URL", "https://staging.test/v3/")
        monkeypatch.setenv("TRANSIT_TIMEOUT_SECONDS", "5")

        settings = AppSettings()

        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "env-key"
        assert settings.base_url == "https://staging.test/v3/"
        assert settings.timeout_seconds == 5.0

    def test_to_client_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings convert into a client configuration."""
        monkeypatch.setenv("TRANSIT_API_KEY", "env-key")

        config = AppSettings().to_client_config()

        assert config.api_key.get_secret_value() == "env-key"
        assert config.base_url == DEFAULT_BASE_URL

    def test_missing_key_is_configuration_error(self) -> None:
        """A client cannot be configured without a key."""
        with pytest.raises(ConfigurationError):
            AppSettings().to_client_config()

    def test_reads_dotenv(self, tmp_path: Path) -> None:
        """A .env file in the working directory is honoured."""
        (tmp_path / ".env").write_text("TRANSIT_API_KEY=dotenv-key\n")

        settings = AppSettings()

        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "dotenv-key"


class TestFromSettings:
    """Tests for TransitClient.from_settings."""

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The client picks up the environment configuration."""
        monkeypatch.setenv("TRANSIT_API_KEY", "env-key")
        monkeypatch.setenv("TRANSIT_USER_AGENT", "my-app/1.0")

        with TransitClient.from_settings() as client:
            assert client.config.user_agent == "my-app/1.0"

    def test_from_settings_without_key(self) -> None:
        """Missing key surfaces as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            TransitClient.from_settings()
