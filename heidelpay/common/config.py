"""Central environment-driven settings for the heidelpay client.

Loaded once on import; callers can pass their own `HeidelpaySettings` to the
client instead (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from heidelpay.common.errors import ConfigurationError


class HeidelpaySettings(BaseSettings):
    """Typed view of client configuration from `HEIDELPAY_*` variables."""

    service_name: str = "heidelpay-client"
    log_level: str = "INFO"
    api_url: str = "https://api.heidelpay.com"
    sandbox_api_url: str = "https://dev-api.heidelpay.com"
    api_version: str = "v1"
    timeout_seconds: float = 30.0
    locale: str = "en_US"
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_prefix="HEIDELPAY_", env_file=".env", extra="ignore")

    def base_url(self, env: str | None = None) -> str:
        """Return the versioned API root for one environment name."""

        if env in (None, "", "production"):
            host = self.api_url
        elif env in ("sandbox", "dev"):
            host = self.sandbox_api_url
        else:
            raise ConfigurationError(f"Unknown environment: {env}")
        return f"{host.rstrip('/')}/{self.api_version}"


settings = HeidelpaySettings()
