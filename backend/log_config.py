from __future__ import annotations
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

try:
    from .settings import get_settings
except ImportError:
    from settings import get_settings


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extra_payload = getattr(record, "payload", None)
        if isinstance(extra_payload, dict):
            payload["payload"] = extra_payload
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt.lower() == "json":
        return JsonFormatter()
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install one stdout handler on the root logger; repeated calls only adjust the level."""
    settings = get_settings()
    level_name = (level or settings["LOG_LEVEL"] or "INFO").upper()
    lvl = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    root.setLevel(lvl)
    # httpx logs every request URL at INFO, which would leak query-string keys
    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(lvl)
    handler.setFormatter(_build_formatter(fmt or settings["LOG_FORMAT"] or "text"))
    root.addHandler(handler)

    logging.getLogger("uvicorn.error").setLevel(lvl)
    logging.getLogger("uvicorn.access").setLevel(lvl)
