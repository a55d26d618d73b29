"""
Centralized configuration with environment variable overrides.

Model settings, script constants, audit storage and server options are
all configurable here. Nothing is hardcoded in the conversation logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

from order_support.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

AUDIT_BACKENDS = ("gcs", "local", "memory")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ModelConfig:
    """Chat model settings for the two call sites."""

    api_key: str = os.getenv("OPENAI_API_KEY", "")
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    intro_temperature: float = _safe_float("INTRO_TEMPERATURE", "0.0")
    menu_temperature: float = _safe_float("MENU_TEMPERATURE", "0.5")
    max_tokens: int = _safe_int("LLM_MAX_TOKENS", "200")
    timeout_sec: float = _safe_float("LLM_TIMEOUT_SEC", "30.0")


@dataclass(frozen=True)
class ScriptConfig:
    """Constants of the scripted conversation."""

    customer_number_pattern: str = os.getenv("CUSTOMER_NUMBER_PATTERN", r"123-456(?:-\d{4})?")
    customer_name: str = os.getenv("CUSTOMER_NAME", "Lily")
    group: str = os.getenv("EXPERIMENT_GROUP", "experiment")
    reference_date: str = os.getenv("SCRIPT_REFERENCE_DATE", "12.9.2024")


@dataclass(frozen=True)
class AuditConfig:
    """Where conversation transcripts are written."""

    backend: str = os.getenv("AUDIT_BACKEND", "gcs")
    bucket: str = os.getenv("AUDIT_BUCKET", "conversation-logs-experiment")
    prefix: str = os.getenv("AUDIT_PREFIX", "conversation_logs")
    key_base64: str = os.getenv("GCLOUD_KEY_BASE64", "")
    local_dir: str = os.getenv("AUDIT_LOCAL_DIR", "conversation_logs")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP transport settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "3000")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    model: ModelConfig = field(default_factory=ModelConfig)
    script: ScriptConfig = field(default_factory=ScriptConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    for name, value in [
        ("INTRO_TEMPERATURE", config.model.intro_temperature),
        ("MENU_TEMPERATURE", config.model.menu_temperature),
    ]:
        if not 0.0 <= value <= 2.0:
            raise ValueError(f"{name} must be between 0.0 and 2.0, got {value}")
    if config.model.max_tokens < 1:
        raise ValueError(f"LLM_MAX_TOKENS must be >= 1, got {config.model.max_tokens}")
    if config.model.timeout_sec <= 0:
        raise ValueError(f"LLM_TIMEOUT_SEC must be > 0, got {config.model.timeout_sec}")
    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")
    if config.audit.backend not in AUDIT_BACKENDS:
        raise ValueError(
            f"AUDIT_BACKEND must be one of {list(AUDIT_BACKENDS)}, got {config.audit.backend!r}"
        )
    try:
        re.compile(config.script.customer_number_pattern)
    except re.error as exc:
        raise ValueError(f"CUSTOMER_NUMBER_PATTERN is not a valid regex: {exc}") from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    logger.info("Configuration loaded (model=%s, audit=%s)", config.model.llm_model, config.audit.backend)
    return config


# Singleton instance
settings = load_config()
