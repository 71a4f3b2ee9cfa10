"""
HealthTrackerAI Application Settings

Configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="healthtracker", description="Database name")
    user: str = Field(default="healthtracker", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def sync_url(self) -> str:
        """Generate sync database URL for Alembic migrations."""
        password = self.password.get_secret_value()
        return f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class OpenAISettings(BaseSettings):
    """OpenAI API configuration."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_OPENAI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    model: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    max_tokens: int = Field(default=800, ge=50, le=4096)
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)


class TwilioSettings(BaseSettings):
    """Twilio SMS configuration."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_TWILIO_")

    account_sid: str = Field(default="", description="Twilio account SID")
    auth_token: SecretStr = Field(default=SecretStr(""), description="Twilio auth token")
    phone_number: str = Field(default="", description="Sender phone number (E.164)")

    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token.get_secret_value() and self.phone_number)


class FirebaseSettings(BaseSettings):
    """
    Firebase configuration.

    Admin credentials are used server-side for ID token verification,
    user lookup and FCM sends. The web config and VAPID key are handed
    to browsers and the messaging service worker.
    """

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_FIREBASE_")

    project_id: str = Field(default="", description="Firebase project ID")
    client_email: str = Field(default="", description="Service account client email")
    private_key: SecretStr = Field(default=SecretStr(""), description="Service account private key")

    vapid_key: str = Field(default="", description="Web push VAPID public key")
    web_api_key: str = Field(default="", description="Firebase web API key")
    auth_domain: str = Field(default="", description="Firebase auth domain")
    storage_bucket: str = Field(default="", description="Firebase storage bucket")
    messaging_sender_id: str = Field(default="", description="FCM sender ID")
    app_id: str = Field(default="", description="Firebase web app ID")

    @field_validator("private_key", mode="before")
    @classmethod
    def unescape_private_key(cls, v):
        """Environment files carry the PEM with literal \\n and optional quotes."""
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if isinstance(v, str):
            v = v.replace("\\n", "\n").strip()
            if len(v) >= 2 and v[0] == '"' and v[-1] == '"':
                v = v[1:-1]
        return v

    def is_admin_configured(self) -> bool:
        return bool(self.project_id and self.client_email and self.private_key.get_secret_value())

    def web_config(self) -> dict:
        """Config payload posted to the messaging service worker."""
        return {
            "apiKey": self.web_api_key,
            "authDomain": self.auth_domain,
            "projectId": self.project_id,
            "storageBucket": self.storage_bucket,
            "messagingSenderId": self.messaging_sender_id,
            "appId": self.app_id,
        }


class UsdaSettings(BaseSettings):
    """USDA FoodData Central configuration."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_USDA_")

    api_key: SecretStr = Field(default=SecretStr(""), description="FoodData Central API key")
    api_url: str = Field(
        default="https://api.nal.usda.gov/fdc/v1/foods/search",
        description="Food search endpoint",
    )
    page_size: int = Field(default=10, ge=1, le=200)
    timeout_seconds: float = Field(default=10.0, gt=0)


class InstallPromptSettings(BaseSettings):
    """Defaults for the PWA install-prompt policy."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_PWA_")

    max_dismissals: int = Field(default=3, ge=1, le=100)
    dismissed_key: str = Field(default="pwa-install-dismissed")
    installed_key: str = Field(default="pwa-installed")
    dismiss_count_key: str = Field(default="pwa-dismiss-count")
    suppress_after_dismiss: bool = Field(default=True)
    require_mobile: bool = Field(default=True)
    wait_for_interaction_on_chrome: bool = Field(default=True)
    treat_tablet_viewport_as_mobile: bool = Field(default=False)


class RateLimitSettings(BaseSettings):
    """Token-bucket limits per client IP."""

    model_config = SettingsConfigDict(env_prefix="HEALTHTRACKER_RATE_LIMIT_")

    requests_per_minute: int = Field(default=60, ge=1, le=1000)
    admin_requests_per_minute: int = Field(default=20, ge=1, le=1000)
    burst_size: int = Field(default=10, ge=0, le=1000)
    # Only enable behind a proxy that overwrites X-Forwarded-For
    trust_forwarded_for: bool = False


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with the
    HEALTHTRACKER_ prefix. Sensitive values use SecretStr to prevent
    accidental logging.

    Usage:
        settings = get_settings()
        db_url = settings.database.async_url
    """

    model_config = SettingsConfigDict(
        env_prefix="HEALTHTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_prefix: str = Field(default="/api", description="Mount point for API routes")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    admin_email: str = Field(default="", description="Email of the single admin account")
    sentry_dsn: SecretStr = Field(default=SecretStr(""), description="Sentry DSN (empty disables)")

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    twilio: TwilioSettings = Field(default_factory=TwilioSettings)
    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)
    usda: UsdaSettings = Field(default_factory=UsdaSettings)
    pwa: InstallPromptSettings = Field(default_factory=InstallPromptSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, use dependency injection to override.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
