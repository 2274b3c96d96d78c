# event_registration/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (Docker Compose / the cron host).
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = ""
    KAFKA_BOOTSTRAP_SERVERS_PROD: str = ""

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str
    KAFKA_BOOTSTRAP_SERVERS_LOCAL: str = "localhost:9092"

    # Other secrets
    JWT_SECRET: str
    INTERNAL_API_KEY: str
    CRON_SECRET: str

    # --- Feature switches ---
    KAFKA_ENABLED: bool = True
    SCHEDULER_ENABLED: bool = True
    RATE_LIMIT_ENABLED: bool = True
    REGISTRATION_RATE_LIMIT: str = "10/minute"
    LOG_LEVEL: str = "INFO"

    # --- Cleanup job (daily, UTC) ---
    CLEANUP_CRON_HOUR: int = 2
    CLEANUP_CRON_MINUTE: int = 0

    # --- Retention windows in days ---
    RETENTION_EXPIRED_USER_ROLES_DAYS: int = 30
    RETENTION_AUDIT_LOGS_DAYS: int = 90
    RETENTION_FAILED_PAYMENTS_DAYS: int = 7
    RETENTION_WAITING_LIST_DAYS: int = 7
    RETENTION_CANCELLED_REGISTRATIONS_DAYS: int = 30
    RETENTION_NOTIFICATION_LOGS_DAYS: int = 60

    # --- Transaction behaviour ---
    LOCK_TIMEOUT_MS: int = 5000
    TRANSIENT_RETRY_ATTEMPTS: int = 2
    RETRY_BACKOFF_MIN_SECONDS: float = 0.2
    RETRY_BACKOFF_MAX_SECONDS: float = 2.0

    # --- Dynamic Properties ---
    # These properties return the correct URL based on the ENV
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def KAFKA_BOOTSTRAP_SERVERS(self) -> str:
        return (
            self.KAFKA_BOOTSTRAP_SERVERS_LOCAL
            if self.ENV == "local"
            else self.KAFKA_BOOTSTRAP_SERVERS_PROD
        )


# Create a single instance of the settings
settings = Settings()
