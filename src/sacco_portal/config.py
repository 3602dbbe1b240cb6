# src/sacco_portal/config.py

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(PROJECT_DIR / ".env")


class Config(BaseModel):
    """Runtime settings for the portal client."""

    # Backend
    api_base_url: str = "http://localhost:4001/api"
    timeout: float = 15.0
    read_retries: int = Field(default=1, ge=0)

    # Local state
    data_dir: Path = Path.home() / ".sacco_portal"

    # Display
    currency: str = "ETB"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from SACCO_* environment variables."""
        values = {}
        env_map = {
            "SACCO_API_URL": "api_base_url",
            "SACCO_TIMEOUT": "timeout",
            "SACCO_READ_RETRIES": "read_retries",
            "SACCO_DATA_DIR": "data_dir",
            "SACCO_CURRENCY": "currency",
        }
        for env_key, field_name in env_map.items():
            value = os.getenv(env_key)
            if value:
                values[field_name] = value
        return cls(**values)

    @property
    def public_base_url(self) -> str:
        """Backend origin without the trailing /api segment (used for upload URLs)."""
        base = self.api_base_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return base


CONFIG = Config.from_env()
DATA_DIR = Path(CONFIG.data_dir).expanduser()
