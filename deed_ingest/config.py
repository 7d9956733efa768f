"""
Runtime configuration, read from the environment (and a local .env file).

    OPENAI_API_KEY                   Enables machine translation of names
    DEED_INGEST_TRANSLATION_MODEL    Chat model used for translation
    DEED_INGEST_TRANSLATION_TIMEOUT  Seconds before a translation call is abandoned
    DEED_INGEST_SOURCE_LANGUAGE      Language of the source-script names
    DEED_INGEST_TARGET_LANGUAGE      Language names are rendered into
    DEED_INGEST_DB_PATH              SQLite file for persisted transactions
    DEED_INGEST_LOG_LEVEL            DEBUG / INFO / WARNING / ...
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Validated application settings."""

    openai_api_key: Optional[str] = None
    translation_model: str = "gpt-5"
    translation_timeout: float = Field(default=15.0, gt=0)
    source_language: str = "Tamil"
    target_language: str = "English"
    db_path: str = "data/transactions.db"
    log_level: str = "INFO"


_ENV_KEYS: dict[str, str] = {
    "openai_api_key": "OPENAI_API_KEY",
    "translation_model": "DEED_INGEST_TRANSLATION_MODEL",
    "translation_timeout": "DEED_INGEST_TRANSLATION_TIMEOUT",
    "source_language": "DEED_INGEST_SOURCE_LANGUAGE",
    "target_language": "DEED_INGEST_TARGET_LANGUAGE",
    "db_path": "DEED_INGEST_DB_PATH",
    "log_level": "DEED_INGEST_LOG_LEVEL",
}


def load_settings(use_dotenv: bool = True, **overrides: object) -> Settings:
    """Build Settings from environment variables.

    Args:
        use_dotenv: Load a .env file from the working directory first.
        **overrides: Explicit values that win over the environment.
    """
    if use_dotenv:
        load_dotenv()

    raw: dict[str, object] = {}
    for field_name, env_key in _ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value:
            raw[field_name] = value
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**raw)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once, with a standard format."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(getattr(logging, level.upper(), logging.INFO))
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
