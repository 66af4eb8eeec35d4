# app/core/config.py
"""
Application settings.
Values come from environment variables, optionally loaded from a .env file.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_PASSWORD = "Admin123!"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Core ---
    app_env: str = "development"
    secret_key: str
    log_level: str = "INFO"

    # --- Database ---
    database_url: str = "sqlite:///data/db/portal.sqlite"
    db_echo: bool = False

    # --- Tokens ---
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # --- HTTP ---
    allowed_origins: str = "http://localhost:3000"
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # --- Audit ---
    audit_log_dir: str = "logs"

    # --- Bootstrap admin ---
    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: str = DEFAULT_ADMIN_PASSWORD

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
