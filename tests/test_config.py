"""Tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from stockdash.core.config import Environment, Settings, StorageBackend, get_settings


class TestSettings:
    """Test Settings class."""

    def test_default_values(self):
        settings = Settings(_env_file=None)

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.app_name == "Stock Dashboard"
        assert settings.storage_backend == StorageBackend.MEMORY
        assert settings.stock_table == "stock-data"
        assert settings.historical_bucket == "cloudstocks-historical-data"
        assert settings.default_range == "1M"
        assert settings.allow_synthetic_data is True
        assert settings.synth_volatility == 0.02
        assert settings.reference_cache_ttl_seconds == 300
        assert settings.alpha_vantage_api_key is None
        assert settings.market_data_enabled is False
        assert settings.uses_aws is False

    def test_environment_variables(self):
        env = {
            "STORAGE_BACKEND": "aws",
            "STOCK_TABLE": "prod-stocks",
            "ALPHA_VANTAGE_API_KEY": "secret",
            "SYNTH_VOLATILITY": "0.05",
        }
        with patch.dict(os.environ, env):
            settings = Settings(_env_file=None)

        assert settings.uses_aws is True
        assert settings.stock_table == "prod-stocks"
        assert settings.market_data_enabled is True
        assert settings.synth_volatility == 0.05

    def test_cors_origins_list(self):
        assert Settings(_env_file=None, cors_origins="*").cors_origins_list == ["*"]
        settings = Settings(_env_file=None, cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_environment_properties(self):
        assert Settings(_env_file=None, environment="production").is_production
        assert not Settings(_env_file=None, environment="staging").is_production

    def test_default_range_normalized(self):
        assert Settings(_env_file=None, default_range=" 5y ").default_range == "5Y"

    def test_git_sha(self):
        with patch.dict(os.environ, {"GIT_SHA": "abc123"}):
            assert Settings(_env_file=None).git_sha == "abc123"


class TestValidation:

    def test_defaults_are_valid(self):
        assert Settings(_env_file=None).validate_config() == []

    def test_production_issues(self):
        settings = Settings(_env_file=None, environment="production", debug=True)
        issues = settings.validate_config()

        assert "Debug mode should be disabled in production" in issues
        assert "CORS should be restricted in production" in issues
        assert "In-memory storage should not be used in production" in issues

    def test_numeric_ranges(self):
        settings = Settings(
            _env_file=None,
            reference_cache_ttl_seconds=0,
            synth_volatility=1.5,
            request_timeout_seconds=0,
        )
        assert len(settings.validate_config()) == 3

    def test_get_settings_raises_in_production(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "production", "CORS_ORIGINS": "*"}):
            with pytest.raises(ValueError, match="Critical configuration issues"):
                get_settings()

    def test_get_settings_reports_outside_production(self, capsys):
        with patch.dict(os.environ, {"SYNTH_VOLATILITY": "0"}):
            settings = get_settings()

        assert settings.synth_volatility == 0
        assert "Configuration issues found" in capsys.readouterr().out

