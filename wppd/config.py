"""Configuration settings for the WPPD API.

All settings are loaded from environment variables (or a ``.env`` file) using
pydantic-settings. The ``get_settings()`` function returns a cached instance
that the process entry point hands to ``build_container()``.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_env: Deployment name (production, staging, development, test).
        database_url: SQLAlchemy async connection URL.
        api_host: Bind address for the API server.
        api_port: Bind port for the API server.
        api_debug: Enable FastAPI debug mode and SQL echo.
        api_log_level: Logging level (debug, info, warning, error, critical).
        log_directory: Directory for rotating log files. Console only when empty.
        cors_whitelist: Comma-separated list of allowed CORS origins.
        php_version_api: URL of the php.net releases JSON endpoint.
        wp_version_api: URL of the WordPress core version-check endpoint.
        wp_plugin_api_url: Base URL of the WordPress.org plugin info API.
        wordfence_api_url: URL of the WordFence vulnerability feed.
        wordfence_api_key: Optional WordFence API key.
        http_timeout: Timeout in seconds for outbound HTTP calls.
        scheduler_enabled: Start the cron scheduler with the application.
        mailing_enabled: Send the report email from the report task.
        mailing_ses_region: AWS region for SES.
        mailing_ses_access_key_id: AWS access key for SES.
        mailing_ses_secret_access_key: AWS secret key for SES.
        mailing_report_sender: Sender address of the report email.
        mailing_report_recipient: Recipient address of the report email.
        mailing_report_cron: Cron expression for the report email task.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = "production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./sqlite/wppd.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_log_level: str = "info"
    log_directory: str = ""
    cors_whitelist: str = ""

    # External sources
    php_version_api: str = "https://www.php.net/releases/index.php?json"
    wp_version_api: str = "https://api.wordpress.org/core/version-check/1.7/"
    wp_plugin_api_url: str = "https://api.wordpress.org/plugins/info/1.0"
    wordfence_api_url: str = (
        "https://www.wordfence.com/api/intelligence/v2/vulnerabilities/production"
    )
    wordfence_api_key: str = ""
    http_timeout: float = 15.0

    # Scheduler
    scheduler_enabled: bool = True

    # Mailing
    mailing_enabled: bool = False
    mailing_ses_region: str = ""
    mailing_ses_access_key_id: str = ""
    mailing_ses_secret_access_key: str = ""
    mailing_report_sender: str = ""
    mailing_report_recipient: str = ""
    mailing_report_cron: str = "0 8 * * 1"

    @property
    def cors_origins(self) -> list[str]:
        """Split the CORS whitelist into a list of origins.

        Returns:
            Non-empty, stripped origins in declaration order.
        """
        return [origin.strip() for origin in self.cors_whitelist.split(",") if origin.strip()]

    @property
    def ses_configured(self) -> bool:
        """Whether enough SES settings are present to build a mail provider."""
        return bool(
            self.mailing_ses_region
            and self.mailing_ses_access_key_id
            and self.mailing_ses_secret_access_key
        )


@lru_cache
def get_settings() -> Settings:
    """Get or create the cached application settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()
