import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash-image"
MODEL_NAME = os.environ.get("HEADSHOT_MODEL", DEFAULT_MODEL)
MAX_UPLOAD_MB = float(os.environ.get("MAX_UPLOAD_MB", "10"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class InvalidSetting(ValueError):
    pass


def get_api_key() -> Optional[str]:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")


def get_request_timeout_ms() -> Optional[int]:
    raw = os.environ.get("HEADSHOT_REQUEST_TIMEOUT_MS")
    if not raw:
        return None
    try:
        timeout_ms = int(raw)
    except ValueError:
        timeout_ms = 0
    if timeout_ms <= 0:
        logger.error("Invalid HEADSHOT_REQUEST_TIMEOUT_MS value: {!r}", raw)
        raise InvalidSetting(
            f"HEADSHOT_REQUEST_TIMEOUT_MS must be a positive number of milliseconds, got {raw!r}."
        )
    return timeout_ms


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Replace loguru's default stderr sink with one at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    logger.debug("Logging configured at level {}", level.upper())
