"""
Runtime settings read from the environment.

Call load_env() first so values from a local .env are visible.
"""

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_DB_PATH = "data/content.db"
DEFAULT_LOG_DIR = "logs"
DEFAULT_VERSION_ATTEMPTS = 3


@dataclass
class Settings:
    db_path: Path
    log_level: str = "INFO"
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    version_attempts: int = DEFAULT_VERSION_ATTEMPTS

    @classmethod
    def from_env(cls) -> "Settings":
        attempts = os.getenv("CONTENTOPS_VERSION_ATTEMPTS", str(DEFAULT_VERSION_ATTEMPTS))
        try:
            version_attempts = max(1, int(attempts))
        except ValueError:
            raise SystemExit(f"CONTENTOPS_VERSION_ATTEMPTS must be an integer, got {attempts!r}")
        return cls(
            db_path=Path(os.getenv("CONTENTOPS_DB", DEFAULT_DB_PATH)),
            log_level=os.getenv("CONTENTOPS_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(os.getenv("CONTENTOPS_LOG_DIR", DEFAULT_LOG_DIR)),
            version_attempts=version_attempts,
        )
