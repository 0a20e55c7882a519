# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables with sensible defaults.
The Settings class aggregates all subsettings; a cached instance is
provided via get_settings().

Example:
    >>> from elemo.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.smtp.hostname
    'localhost'
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from elemo import __version__

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"


class SMTPSettings(BaseSettings):
    """SMTP delivery configuration for transactional email.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Connect over implicit TLS.
        start_tls: Upgrade a plain connection with STARTTLS.
        timeout: Connection timeout in seconds.
        from_address: Sender address.
        reply_to_address: Reply-To address.
        hostname: Public hostname used to build links in emails.
        support_address: Support address shown in emails.
        templates_dir: Directory holding the ``email/`` templates.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 587
    username: str = ""
    password: SecretStr = SecretStr("")
    use_tls: bool = False
    start_tls: bool = True
    timeout: float = 30.0
    from_address: str = "no-reply@elemo.app"
    reply_to_address: str = "no-reply@elemo.app"
    hostname: str = "localhost"
    support_address: str = "support@elemo.app"
    templates_dir: Path = DEFAULT_TEMPLATES_DIR


class OTelSettings(BaseSettings):
    """OpenTelemetry observability configuration.

    Attributes:
        enabled: Whether OpenTelemetry is enabled.
        service_name: Name of the service for tracing.
        exporter_otlp_endpoint: OTLP exporter endpoint.
    """

    model_config = SettingsConfigDict(
        env_prefix="OTEL_",
        extra="ignore",
    )

    enabled: bool = False
    service_name: str = "elemo"
    exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT",
    )


class LicenseSettings(BaseSettings):
    """License configuration.

    Attributes:
        path: Path of the YAML license document.
        reminder_window_days: Days before expiry when reminders are sent.
    """

    model_config = SettingsConfigDict(
        env_prefix="LICENSE_",
        extra="ignore",
    )

    path: Path = Path("config/license.yaml")
    reminder_window_days: int = Field(default=30, ge=1)

    @property
    def reminder_window(self) -> timedelta:
        return timedelta(days=self.reminder_window_days)


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        version: Disclosed build version.
        commit: Disclosed build commit.
        build_date: Disclosed build date.
        smtp: SMTP settings.
        otel: OpenTelemetry settings.
        license: License settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    version: str = __version__
    commit: str = ""
    build_date: str = ""

    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    otel: OTelSettings = Field(default_factory=OTelSettings)
    license: LicenseSettings = Field(default_factory=LicenseSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with a local SMTP hostname.
        """
        if self.environment == "production" and self.smtp.hostname == "localhost":
            raise ValueError(
                "SMTP hostname must be set in production. "
                "Set SMTP_HOSTNAME environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Call clear_settings_cache() to reload settings from the environment.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache."""
    get_settings.cache_clear()
