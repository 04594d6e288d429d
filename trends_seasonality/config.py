"""
Runtime configuration.

Values come from the environment (a local .env file is honoured) and are
read-only for the duration of a run. Explicit overrides win over env values.
"""

import os
import logging
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_UPLOAD_MB = 10.0


@dataclass(frozen=True)
class Config:
    """Settings for one analysis session."""
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    max_upload_mb: float = DEFAULT_MAX_UPLOAD_MB
    log_level: str = "INFO"
    output_dir: str = "outputs"

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)

    @property
    def enhancement_available(self) -> bool:
        return bool(self.openai_api_key) and self.openai_api_key.startswith("sk-")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def load_config(env_file: Optional[str] = None, **overrides) -> Config:
    """
    Build a Config from environment variables:
      OPENAI_API_KEY, TRENDS_OPENAI_MODEL, TRENDS_MAX_UPLOAD_MB,
      TRENDS_LOG_LEVEL, TRENDS_OUTPUT_DIR
    Keyword overrides set to None are ignored.
    """
    load_dotenv(env_file)

    config = Config(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("TRENDS_OPENAI_MODEL", DEFAULT_MODEL),
        max_upload_mb=_float_env("TRENDS_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB),
        log_level=os.getenv("TRENDS_LOG_LEVEL", "INFO").upper(),
        output_dir=os.getenv("TRENDS_OUTPUT_DIR", "outputs"),
    )
    given = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **given) if given else config
