"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/budget_app/core/config.py
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
_project_root = _backend_dir.parent
ENV_FILE = _project_root / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)

PROJECT_ROOT = _project_root


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Chapter Budget"
    app_env: str = Field(default="development", description="Application environment")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"budget_app.api": "DEBUG"})'
    )
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/budget.log",
        description="Path to log file (relative to project root)"
    )
    log_file_retention: int = Field(
        default=14,
        ge=1,
        description="Number of days to keep log files"
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (tokens, keys) - NOT RECOMMENDED"
    )

    # Storage
    database_url: str = Field(
        default=f"sqlite:///{_project_root / 'data' / 'budget.db'}",
        description="SQLAlchemy URL of the durable key-value store"
    )
    store_name: str = Field(
        default="chapter",
        min_length=1,
        description="Logical name of the organizational unit whose budget this service owns"
    )

    # Inference (Ollama)
    ollama_url: str = Field(default="http://localhost:11434", description="Ollama API URL")
    ollama_model: str = Field(default="llama3.3", description="Model used for the budget assistant")
    llm_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Timeout for a single LLM request (seconds)"
    )
    llm_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for the budget assistant"
    )
    llm_max_retries: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Attempts made on timeouts or connection errors"
    )

    # Metrics
    metrics_enabled: bool = Field(default=False, description="Expose Prometheus metrics on /metrics")

    @field_validator("ollama_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize Ollama URL (no trailing slash, no /v1 suffix)"""
        v = v.strip().rstrip("/")
        if v.endswith("/v1"):
            v = v[:-3]
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
