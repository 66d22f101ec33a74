"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_token: str
    environment: str = _ENVIRONMENT
    storage_backend: Literal["file", "supabase", "memory"] = "file"
    data_dir: str = ".fieldforce"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    camera_user_index: int | None = 0
    camera_environment_index: int | None = 1
    camera_device_node_template: str | None = "/dev/video{index}"
    camera_timeout_seconds: float = 15.0
    geolocation_url: str = "http://127.0.0.1:8765/location"
    geolocation_timeout_seconds: float = 10.0
    liveness_backend: Literal["timed", "openai"] = "timed"
    liveness_challenge_seconds: float = 3.0
    liveness_verify_seconds: float = 1.5
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    checkpoint_radius_meters: float = 200.0

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
