"""
Environment-driven settings.
"""

from __future__ import annotations

import logging
import os

DEFAULT_API_BASE_URL = "https://rupse_crm_backend.poudelanish17.com.np/api"

LOGIN_ENDPOINT = "/auth/login"
ENTRIES_READ_ENDPOINT = "/protected/v1/forms/read"
ENTRIES_INSERT_ENDPOINT = "/unprotected/v1/forms/insert"

LOGIN_PATH = "/login"
DIRECTORY_PATH = "/entry-details"

# Display colors for entry groups; indices are stable, only append.
PALETTE: tuple[str, ...] = (
    "#667eea",
    "#764ba2",
    "#f59e0b",
    "#10b981",
    "#ef4444",
    "#3b82f6",
    "#ec4899",
    "#14b8a6",
    "#8b5cf6",
    "#f97316",
)
PALETTE_SIZE = len(PALETTE)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def api_base_url() -> str:
    url = os.environ.get("QRBOOK_API_BASE_URL", DEFAULT_API_BASE_URL).strip() or DEFAULT_API_BASE_URL
    return url.rstrip("/")


def http_timeout_s() -> float:
    return _env_float("QRBOOK_HTTP_TIMEOUT_S", 30.0)


def credentials_file() -> str | None:
    return os.environ.get("QRBOOK_CREDENTIALS_FILE", "").strip() or None


def log_level() -> str:
    return os.environ.get("QRBOOK_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def configure_logging() -> None:
    level = logging.getLevelName(log_level())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def cors_origins() -> list[str]:
    """
    Comma-separated `QRBOOK_CORS_ORIGINS`; empty disables CORS.
    """
    raw = os.environ.get("QRBOOK_CORS_ORIGINS", "").strip()
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
