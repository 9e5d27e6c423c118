"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    INFERENCE_MODEL=google/gemini-2.5-pro uvicorn app.main:app
    export INFERENCE_TIMEOUT_SEC=45

A `.env` file at the project root is loaded automatically.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # INFERENCE_MODEL == inference_model
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Inference endpoint                                                  #
    # ------------------------------------------------------------------ #
    inference_url: str = Field(
        "https://ai.gateway.lovable.dev/v1/chat/completions",
        description="OpenAI-compatible chat completions endpoint",
    )
    inference_api_key: str = Field(
        "", description="Bearer token for the inference endpoint"
    )
    inference_model: str = Field(
        "google/gemini-2.5-flash", description="Multimodal model identifier"
    )
    inference_temperature: float = Field(
        0.1, description="Sampling temperature (low = stable verdicts)"
    )
    inference_referer: str = Field(
        "https://lovable.dev", description="HTTP-Referer attribution header"
    )
    inference_title: str = Field(
        "AI Image Detector", description="X-Title attribution header"
    )
    inference_system_prompt_path: Optional[str] = Field(
        None, description="Optional file whose text replaces the built-in rubric"
    )

    # ------------------------------------------------------------------ #
    # Inference resilience                                                #
    # ------------------------------------------------------------------ #
    inference_timeout_sec: float = Field(
        30.0, description="Hard timeout per inference attempt (seconds)"
    )
    inference_max_attempts: int = Field(
        2, description="Total attempts on transport errors and 5xx responses"
    )
    inference_retry_initial_delay: float = Field(
        1.0, description="First retry delay (seconds)"
    )
    inference_retry_max_delay: float = Field(
        5.0, description="Max retry back-off delay (seconds)"
    )
    inference_retry_exp_base: float = Field(
        2.0, description="Exponential back-off multiplier"
    )

    # ------------------------------------------------------------------ #
    # Remote image fetch                                                  #
    # ------------------------------------------------------------------ #
    fetch_timeout_sec: float = Field(
        20.0, description="Total timeout for fetching a remote image (seconds)"
    )
    fetch_user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        description="Browser User-Agent sent with remote image fetches",
    )
    default_content_type: str = Field(
        "image/jpeg", description="Content type assumed when none is known"
    )

    # ------------------------------------------------------------------ #
    # HTTP surface                                                        #
    # ------------------------------------------------------------------ #
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )

    # ------------------------------------------------------------------ #
    # Client orchestrator                                                 #
    # ------------------------------------------------------------------ #
    client_base_url: str = Field(
        "http://localhost:8000", description="Where the client posts /analyze-image"
    )
    client_tick_interval_sec: float = Field(
        1.5, description="Seconds between status-label advances while loading"
    )
    client_timeout_sec: float = Field(
        90.0, description="Client-side total timeout for one analysis call"
    )


# Single shared instance: import this everywhere.
settings = Settings()
