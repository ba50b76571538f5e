import logging
import os
from typing import Optional

API_BASE = os.getenv("BRIEF_API_BASE", "http://localhost:4000").rstrip("/")
CHAT_ENDPOINT = os.getenv("CHAT_ENDPOINT", "/api/interview/chat")
CHAT_DEFAULT_USER = os.getenv("CHAT_DEFAULT_USER", "learnworlds:svz")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def _timeout_from_env() -> Optional[float]:
    raw = os.getenv("BRIEF_API_TIMEOUT", "").strip()
    if not raw:
        return None
    return float(raw)


# None: requests waits without limit
API_TIMEOUT = _timeout_from_env()


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once per process (Streamlit reruns scripts)."""
    root = logging.getLogger()
    if getattr(root, "_brief_admin_configured", False):
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root._brief_admin_configured = True
