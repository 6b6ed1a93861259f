"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables (FINSIGHT_ prefix)"""

    model_config = SettingsConfigDict(
        env_prefix="FINSIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service
    service_name: str = "finsight-engine"
    log_level: str = "INFO"

    # Alert thresholds
    revenue_mismatch_pct: float = 50.0
    revenue_mismatch_critical_pct: float = 100.0
    high_nsf_count: int = 3
    low_average_balance: float = 500.0  # $500
    negative_days_high: int = 5
    time_in_business_months: float = 3.0

    # Cross-report thresholds
    cross_report_nsf_spread: int = 3
    cross_report_balance_multiple: float = 3.0


settings = Settings()
