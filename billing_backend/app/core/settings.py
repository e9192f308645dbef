"""Application settings loaded from the environment."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "CHANGE_ME"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Billing Tool"
    api_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    secret_key: str = DEFAULT_SECRET_KEY
    access_token_expire_minutes: int = 60 * 24
    database_url: str = "sqlite:///./billing.db"

    default_currency: str = "INR"
    invoice_number_prefix: str = "INV"

    upload_dir: Path = Path("uploads")
    upload_url_prefix: str = "/uploads"
    max_logo_bytes: int = 5 * 1024 * 1024

    # Outbound email (SMTP)
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_host: Optional[str] = None
    email_port: Optional[int] = None
    email_secure: bool = False
    email_service: str = "gmail"
    email_timeout_seconds: int = 30

    @property
    def SECRET_KEY(self) -> str:
        return self.secret_key

    @property
    def ACCESS_TOKEN_EXPIRE_MINUTES(self) -> int:
        return self.access_token_expire_minutes

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)

    def missing_configuration(self) -> list[str]:
        """Return the names of required settings that are not set."""
        missing = []
        if not self.database_url:
            missing.append("DATABASE_URL")
        if not self.secret_key or (self.environment != "development" and self.secret_key == DEFAULT_SECRET_KEY):
            missing.append("SECRET_KEY")
        return missing


_settings_instance = None


def get_settings() -> Settings:
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
