"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Ledger and interest accrual engine configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Interest calculation configuration
    day_count_convention: str = "actual_month"  # actual_month, monthly_actual, actual_365, actual_360
    missing_rate_policy: str = "zero"  # zero or raise
    amount_precision: int = 2
    max_amount: str = "1000000000000.00"  # Largest single deposit or withdrawal

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    class Config:
        env_prefix = "GIC_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
