"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent / ".env"
load_dotenv(ENV_PATH)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Logo storage (Supabase public bucket)
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY: str = os.getenv("SUPABASE_SERVICE_KEY", "")
LOGO_BUCKET: str = os.getenv("LOGO_BUCKET", "wholesale_logos")
LOGO_FETCH_TIMEOUT: float = float(os.getenv("LOGO_FETCH_TIMEOUT", "30"))

# Auth: bearer token required only when set
API_TOKEN: str = os.getenv("API_TOKEN", "")

# Limits
MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024

# Watermarking
PDF_IGNORE_ENCRYPTION: bool = _env_bool("PDF_IGNORE_ENCRYPTION", True)
DISCLAIMERS_PATH: str = os.getenv("DISCLAIMERS_PATH", "")

# Server
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "3000"))
