"""Pytest configuration and fixtures."""

import os

import pytest

from content_engine.domain.models.project import Project
from content_engine.infrastructure.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env():
    """Keep host CONTENT_ENGINE_* variables out of Settings."""
    saved = {key: value for key, value in os.environ.items() if key.startswith("CONTENT_ENGINE_")}
    for key in saved:
        del os.environ[key]
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    os.environ.update(saved)


@pytest.fixture
def settings():
    return Settings(
        max_retries=2,
        stage_timeout_seconds=5,
        retry_backoff_seconds=0,
        log_format="console",
        _env_file=None
    )


@pytest.fixture
def project():
    return Project(
        project_id="proj-1",
        client_id="client-1",
        client_name="Acme Analytics",
        title="Engineering blog",
        target_audience="backend engineers",
        brand_voice="friendly and precise",
        industry="developer tooling",
        content_goals=["educate", "build trust"],
        keywords=["asyncio", "python"],
        style_preferences={"tone": "conversational"}
    )
