"""
Runtime settings, read from the environment.

A ``.env`` file in the working directory (or any parent) is loaded first, so
local overrides do not need a manual ``export``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from mindtime.storage.persistence import DEFAULT_STORAGE_KEY


DEFAULT_DB_PATH = Path.home() / ".mindtime" / "mindtime.sqlite3"


@dataclass(frozen=True)
class Settings:
    db_path: str = str(DEFAULT_DB_PATH)
    storage_key: str = DEFAULT_STORAGE_KEY
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'Settings':
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))
        return cls(
            db_path=os.environ.get("MINDTIME_DB_PATH", str(DEFAULT_DB_PATH)),
            storage_key=os.environ.get("MINDTIME_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            host=os.environ.get("MINDTIME_HOST", "127.0.0.1"),
            port=int(os.environ.get("MINDTIME_PORT", "3001")),
            log_level=os.environ.get("MINDTIME_LOG_LEVEL", "INFO").upper(),
        )
