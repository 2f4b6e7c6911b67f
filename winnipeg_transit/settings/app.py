"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from winnipeg_transit.transport.config import ClientConfig
from winnipeg_transit.transport.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from winnipeg_transit.transport.errors import ConfigurationError


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    api_key: SecretStr | None = Field(default=None, validation_alias="TRANSIT_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, validation_alias="TRANSIT_BASE_URL")
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT, validation_alias="TRANSIT_USER_AGENT"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, validation_alias="TRANSIT_TIMEOUT_SECONDS"
    )

    def to_client_config(self) -> ClientConfig:
        """Build the client configuration.

        Raises:
            ConfigurationError: If TRANSIT_API_KEY is not set.
        """
        if self.api_key is None or not self.api_key.get_secret_value():
            msg = "TRANSIT_API_KEY is not set"
            raise ConfigurationError(msg)
        return ClientConfig(
            api_key=self.api_key,
            base_url=self.base_url,
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
