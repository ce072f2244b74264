"""Claimflow configuration — loaded from environment variables and .env file."""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLAIMFLOW_",
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Rates applied when a party is registered without any rate configured
    default_contractor_billing_percentage: float = 0.125
    default_estimator_commission_percentage: float = 0.05

    # 48-hour activity compliance
    compliance_warning_hours: float = 36.0
    compliance_overdue_hours: float = 48.0
    requiring_action_limit: int = 10

    # API
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()
