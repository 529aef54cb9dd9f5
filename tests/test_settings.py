"""Tests for environment-driven settings."""

from content_engine.infrastructure.config.settings import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.max_retries == 3
    assert settings.stage_timeout_seconds == 60
    assert settings.retry_backoff_seconds == 1.0
    assert settings.langfuse_public_key is None


def test_environment_variables_use_prefix(monkeypatch):
    monkeypatch.setenv("CONTENT_ENGINE_MAX_RETRIES", "5")
    monkeypatch.setenv("CONTENT_ENGINE_STAGE_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("CONTENT_ENGINE_SEO_OPTIMIZATION", "false")

    settings = Settings(_env_file=None)

    assert settings.max_retries == 5
    assert settings.stage_timeout_seconds == 12.5
    assert settings.seo_optimization is False


def test_pipeline_config_mirrors_settings():
    settings = Settings(
        _env_file=None,
        max_retries=4,
        retry_backoff_seconds=0.25,
        context_window_tokens=2048,
        event_queue_size=16
    )

    config = settings.pipeline_config()

    assert config.max_retries == 4
    assert config.retry_backoff_seconds == 0.25
    assert config.context_window_tokens == 2048
    assert config.event_queue_size == 16


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
