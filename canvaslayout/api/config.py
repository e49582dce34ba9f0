"""
config.py — Environment configuration for the layout API.

Settings come from environment variables, optionally pre-loaded from a local
.env file, and are cached per process.
"""

import os
from functools import lru_cache
from pathlib import Path

# Load .env file if it exists
def _load_dotenv():
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if key and value and key not in os.environ:
                        os.environ[key] = value

_load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Application
        self.app_name: str = os.environ.get("APP_NAME", "canvaslayout")
        self.app_version: str = os.environ.get("APP_VERSION", "0.1.0")
        self.debug: bool = os.environ.get("DEBUG", "false").lower() == "true"
        self.api_prefix: str = os.environ.get("API_PREFIX", "/api/v1")
        self.log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()

        # CORS settings
        self.allowed_origins: list = os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
        ).split(",")

        # Solver defaults, used when a request leaves them out
        self.min_slot_width: float = float(os.environ.get("MIN_SLOT_WIDTH", "10"))
        self.min_slot_height: float = float(os.environ.get("MIN_SLOT_HEIGHT", "10"))
        self.default_slot_width: float = float(os.environ.get("DEFAULT_SLOT_WIDTH", "100"))
        self.default_slot_height: float = float(os.environ.get("DEFAULT_SLOT_HEIGHT", "100"))

    @property
    def solver_defaults(self) -> dict:
        """Option values applied to requests that omit them."""
        return {
            "min_slot_width": self.min_slot_width,
            "min_slot_height": self.min_slot_height,
            "default_dimensions": {
                "width": self.default_slot_width,
                "height": self.default_slot_height,
            },
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
