"""Tests for configuration loading."""

from config import Config, load_config


class TestConfig:
    """Test settings defaults and environment overrides."""

    def test_defaults(self):
        config = Config(_env_file=None)

        assert config.daily_limit == 10
        assert config.monthly_limit == 100
        assert config.short_code_length == 8
        assert config.bcrypt_rounds == 10
        assert config.access_token_minutes == 15
        assert config.refresh_token_minutes == 24 * 60

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DAILY_LIMIT", "2")
        monkeypatch.setenv("DATABASE_URL", "memory://")
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example"]')

        config = load_config()

        assert config.daily_limit == 2
        assert config.database_url == "memory://"
        assert config.cors_origins == ["https://app.example"]

    def test_safe_dump_masks_secrets(self):
        config = Config(_env_file=None, smtp_password="hunter2", access_token_secret="s3cret")

        dumped = config.safe_dump()
        assert dumped["smtp_password"] == "***"
        assert dumped["access_token_secret"] == "***"
        assert dumped["daily_limit"] == config.daily_limit
        assert "hunter2" not in str(dumped)

    def test_no_worker_count_setting(self, monkeypatch):
        # The server runs a single uvicorn process; a stray WORKERS is ignored
        monkeypatch.setenv("WORKERS", "4")

        config = load_config()

        assert "workers" not in Config.model_fields
        assert not hasattr(config, "workers")
