"""
Settings for studylens.
Read from environment variables (prefix STUDYLENS_) or a .env file.
"""

from functools import lru_cache
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StudyLensSettings(BaseSettings):
    """Pipeline, llm and server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STUDYLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # LLM Configuration
    llm_provider: Literal["ollama", "gemini"] = Field(
        default="ollama",
        description="Which generation backend to use"
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server url"
    )
    ollama_model: str = Field(
        default="llama3",
        description="Ollama model name"
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model name"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="LLM temperature"
    )
    request_timeout: int = Field(
        default=120,
        gt=0,
        description="Generation request timeout in seconds"
    )

    # Pipeline Configuration
    chunk_size: int = Field(
        default=4000,
        gt=0,
        description="Maximum characters per chunk sent to the model"
    )
    min_text_length: int = Field(
        default=50,
        ge=0,
        description="Documents with less extracted text are rejected before generation"
    )
    max_attempts: int = Field(
        default=3,
        gt=0,
        description="Generation attempts per chunk"
    )
    request_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds to wait before every generation call except the first"
    )
    retry_backoff: float = Field(
        default=2.0,
        ge=0.0,
        description="Extra seconds added per failed attempt on the same chunk"
    )

    # Storage
    output_dir: str = Field(default="outputs", description="Where finished study guides are written")
    upload_dir: str = Field(default="uploads", description="Where uploaded documents are stored")


@lru_cache()
def get_settings() -> StudyLensSettings:
    """Get the cached settings instance"""
    return StudyLensSettings()
