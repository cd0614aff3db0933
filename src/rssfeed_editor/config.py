"""Environment-driven settings for RSS Feed Editor."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_MS = 1000
DEFAULT_EXPORT_DIR = "."
DEFAULT_MAX_FILENAME_LENGTH = 100
DEFAULT_CHECKPOINT_PATH = "rssfeed_editor_checkpoints.db"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class Settings:
    """Runtime settings, read once at startup."""

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    export_dir: str = DEFAULT_EXPORT_DIR
    max_filename_length: int = DEFAULT_MAX_FILENAME_LENGTH
    checkpoint_path: str = DEFAULT_CHECKPOINT_PATH
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: dict | None = None) -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ

    return Settings(
        request_timeout=_number(env, "RSS_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
        max_attempts=max(1, _number(env, "RSS_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int)),
        retry_base_delay_ms=_number(
            env, "RSS_RETRY_BASE_DELAY_MS", DEFAULT_RETRY_BASE_DELAY_MS, int
        ),
        export_dir=env.get("RSS_EXPORT_DIR", DEFAULT_EXPORT_DIR),
        max_filename_length=_number(
            env, "RSS_MAX_FILENAME_LENGTH", DEFAULT_MAX_FILENAME_LENGTH, int
        ),
        checkpoint_path=env.get("RSS_CHECKPOINT_PATH", DEFAULT_CHECKPOINT_PATH),
        log_level=env.get("RSS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def _number(env, name: str, default, cast):
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%r, using %s", name, raw, default)
        return default
    return value
