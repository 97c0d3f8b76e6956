"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # --- Streaming recitation matcher ---
    similarity_threshold: float = float(os.getenv("RECITER_SIMILARITY_THRESHOLD", "0.70"))
    use_locale_normalization: bool = _env_bool("RECITER_LOCALE_NORMALIZATION", "true")
    locale: str = os.getenv("RECITER_LOCALE", "ar")

    # --- Batch alignment ---
    case_sensitive: bool = _env_bool("RECITER_CASE_SENSITIVE", "false")
    batch_tokenizer: str = os.getenv("RECITER_BATCH_TOKENIZER", "whitespace")

    # --- Practice session ---
    max_attempts_before_skip: int = 3  # failed updates before a skip is offered

    # --- Logging ---
    log_level: str = os.getenv("RECITER_LOG_LEVEL", "INFO").upper()


settings = Settings()
