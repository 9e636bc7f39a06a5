from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator


@lru_cache
def get_settings() -> "Settings":
    """Returns a singleton instance of the application settings."""
    return Settings()


class Settings(BaseSettings):
    """
    Main configuration for IdleWatch.
    Uses Pydantic-Settings for environment variable parsing from .env.
    """

    APP_NAME: str = "IdleWatch"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    TESTING: bool = False

    # AWS Credentials (required outside of tests)
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_SESSION_TOKEN: Optional[str] = None
    # Region used for describe_regions; the Price List API is always us-east-1
    AWS_HOME_REGION: str = "us-east-1"
    AWS_CONNECT_TIMEOUT_SECONDS: int = 10
    AWS_READ_TIMEOUT_SECONDS: int = 60

    # SMTP Email (checked when a notification is sent, not at startup)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: Optional[str] = None
    NOTIFY_RECIPIENT: Optional[str] = None

    # Daily scan
    SCHEDULER_ENABLED: bool = True
    SCAN_SCHEDULE_HOUR: int = 0
    SCAN_SCHEDULE_MINUTE: int = 0
    SCAN_SCHEDULE_TIMEZONE: str = "Asia/Kolkata"

    # Dashboard assets; defaults to the app/static directory shipped with the package
    STATIC_DIR: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    @model_validator(mode="after")
    def validate_all_config(self) -> "Settings":
        """Fail fast on configuration the service cannot start without."""
        if self.TESTING:
            return self

        self._validate_aws_credentials()
        self._validate_schedule()
        return self

    def _validate_aws_credentials(self) -> None:
        missing = [
            name
            for name, value in {
                "AWS_ACCESS_KEY_ID": self.AWS_ACCESS_KEY_ID,
                "AWS_SECRET_ACCESS_KEY": self.AWS_SECRET_ACCESS_KEY,
            }.items()
            if not value
        ]
        if missing:
            raise ValueError(
                f"AWS credentials not configured: {', '.join(missing)} must be set."
            )

    def _validate_schedule(self) -> None:
        if not 0 <= self.SCAN_SCHEDULE_HOUR <= 23:
            raise ValueError("SCAN_SCHEDULE_HOUR must be between 0 and 23.")
        if not 0 <= self.SCAN_SCHEDULE_MINUTE <= 59:
            raise ValueError("SCAN_SCHEDULE_MINUTE must be between 0 and 59.")

    @property
    def mail_configured(self) -> bool:
        """True when a notification email can actually be sent."""
        return bool(self.SMTP_USER and self.SMTP_PASSWORD and self.NOTIFY_RECIPIENT)

    @property
    def aws_credentials(self) -> dict[str, str]:
        """Credentials in the STS-style shape the AWS adapters consume."""
        creds = {}
        if self.AWS_ACCESS_KEY_ID:
            creds["AccessKeyId"] = self.AWS_ACCESS_KEY_ID
        if self.AWS_SECRET_ACCESS_KEY:
            creds["SecretAccessKey"] = self.AWS_SECRET_ACCESS_KEY
        if self.AWS_SESSION_TOKEN:
            creds["SessionToken"] = self.AWS_SESSION_TOKEN
        return creds
