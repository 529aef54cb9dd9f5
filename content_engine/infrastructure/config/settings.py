"""Configuration management for the content engine."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_engine.domain.models.pipeline import PipelineConfig


class Settings(BaseSettings):
    """Application settings loaded from CONTENT_ENGINE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    # Service
    environment: str = Field(default="development", description="development, staging or production")
    service_name: str = Field(default="content-engine")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")

    # Pipeline retry envelope
    max_retries: int = Field(default=3, ge=1, description="Attempts per stage")
    stage_timeout_seconds: float = Field(default=60.0, gt=0, description="Deadline per stage attempt")
    retry_backoff_seconds: float = Field(default=1.0, ge=0, description="Backoff unit, multiplied by attempt")

    # Context windows
    context_window_tokens: int = Field(default=8000, gt=0, description="Token capacity of new windows")

    # Progress events
    event_queue_size: int = Field(default=256, gt=0)
    event_save_timeout_seconds: float = Field(default=5.0, gt=0)

    # Quality checks
    enable_fact_checking: bool = Field(default=True)
    enable_plagiarism_check: bool = Field(default=True)
    seo_optimization: bool = Field(default=True)

    # Langfuse tracing (disabled unless both keys are set)
    langfuse_public_key: Optional[str] = Field(default=None)
    langfuse_secret_key: Optional[str] = Field(default=None)
    langfuse_host: Optional[str] = Field(default=None)

    def pipeline_config(self) -> PipelineConfig:
        """Pipeline policy derived from these settings."""
        return PipelineConfig(
            max_retries=self.max_retries,
            stage_timeout_seconds=self.stage_timeout_seconds,
            retry_backoff_seconds=self.retry_backoff_seconds,
            context_window_tokens=self.context_window_tokens,
            enable_fact_checking=self.enable_fact_checking,
            enable_plagiarism_check=self.enable_plagiarism_check,
            seo_optimization=self.seo_optimization,
            event_queue_size=self.event_queue_size,
            event_save_timeout_seconds=self.event_save_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
