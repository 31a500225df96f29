"""Central environment-driven settings for the gateway.

The process loads this once at startup. Provider secrets are optional here so
the service can boot unconfigured; they are checked lazily by the capability
facade on first use (see `.env.example`).
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "paygate"
    log_level: str = "INFO"
    api_name: str = "payments.do"
    api_version: str = "0.1.0"
    stripe_secret_key: SecretStr | None = None
    stripe_webhook_secret: SecretStr | None = None
    stripe_api_version: str | None = None
    webhook_tolerance_seconds: int = 300
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def provider_configured(self) -> bool:
        return bool(self.stripe_secret_key and self.stripe_secret_key.get_secret_value())


settings = GatewaySettings()
