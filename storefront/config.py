# storefront/config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# -------------------------
# Load .env from project root
# -------------------------
proj_root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=proj_root / ".env")

# -------------------------
# Backend + chat endpoints
# -------------------------
BACKEND_URL = (os.getenv("BACKEND_URL") or os.getenv("BACKEND") or "http://127.0.0.1:8000").rstrip("/")
CHAT_URL = os.getenv("CHAT_URL", "")

# -------------------------
# Session persistence
# -------------------------
SESSION_FILE = Path(os.getenv("SESSION_FILE") or Path.home() / ".hrayfi" / "session.json")

# -------------------------
# Timeouts (seconds) and paging
# -------------------------
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "20"))
UPLOAD_TIMEOUT = int(os.getenv("UPLOAD_TIMEOUT", "30"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "12"))

# Filter sentinels, distinct from any real category/region name
ALL_CATEGORIES = "all-categories"
ALL_REGIONS = "all-regions"

# Price slider span
PRICE_MIN = 0
PRICE_MAX = 1000

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_logging_configured = False


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install the root handler once per process."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _logging_configured = True
