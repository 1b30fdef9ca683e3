"""Application configuration, read from the environment or a ``.env`` file."""

import os
from enum import Enum
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class StorageBackend(str, Enum):
    """Where stock references and historical series are kept."""
    MEMORY = "memory"
    AWS = "aws"


class Settings(BaseSettings):
    """Service settings. Every field maps to an upper-case environment variable."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    environment: Environment = Environment.DEVELOPMENT
    app_name: str = "Stock Dashboard"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Comma separated, "*" allows any origin
    cors_origins: str = "*"
    cors_allow_credentials: bool = True

    metrics_enabled: bool = True
    sentry_dsn: Optional[str] = None
    sentry_traces_sample_rate: float = 0.0
    sentry_profiles_sample_rate: float = 0.0
    sentry_env: str = "production"

    # Reference records live in a DynamoDB table keyed by symbol, series in
    # an S3 bucket under SYMBOL/range.json
    storage_backend: StorageBackend = StorageBackend.MEMORY
    aws_region: str = "us-east-1"
    stock_table: str = "stock-data"
    historical_bucket: str = "cloudstocks-historical-data"
    seed_sample_data: bool = True

    default_range: str = "1M"
    allow_synthetic_data: bool = True
    synth_volatility: float = 0.02
    reference_cache_ttl_seconds: int = 300

    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    request_timeout_seconds: int = 10

    @field_validator("default_range")
    @classmethod
    def _normalize_range(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def git_sha(self) -> Optional[str]:
        return os.environ.get("GIT_SHA")

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def uses_aws(self) -> bool:
        return self.storage_backend == StorageBackend.AWS

    @property
    def market_data_enabled(self) -> bool:
        """Alpha Vantage is only called when an API key is configured."""
        return bool(self.alpha_vantage_api_key)

    def validate_config(self) -> List[str]:
        """Return human readable problems with the current settings."""
        issues = []

        if self.is_production:
            if self.debug:
                issues.append("Debug mode should be disabled in production")
            if "*" in self.cors_origins_list:
                issues.append("CORS should be restricted in production")
            if not self.uses_aws:
                issues.append("In-memory storage should not be used in production")

        if self.reference_cache_ttl_seconds <= 0:
            issues.append("Reference cache TTL must be positive")
        if not 0 < self.synth_volatility < 1:
            issues.append("Synthetic volatility must be between 0 and 1")
        if self.request_timeout_seconds <= 0:
            issues.append("Request timeout must be positive")

        return issues


def get_settings() -> Settings:
    """Load settings, refusing to start a misconfigured production service."""
    settings = Settings()

    issues = settings.validate_config()
    if issues:
        print(f"Configuration issues found: {'; '.join(issues)}")
        if settings.is_production:
            raise ValueError(f"Critical configuration issues in production: {'; '.join(issues)}")

    return settings


settings = get_settings()
