from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_ENV_PATH = Path(__file__).resolve().parents[1] / '.env'


# Load .env from repo root (dev convenience)
def load_env_file(env_path: Optional[Path] = None) -> None:
    env_path = Path(env_path) if env_path else DEFAULT_ENV_PATH
    if not env_path.exists():
        return
    try:
        text = env_path.read_text(encoding='utf-8')
    except OSError as e:
        log.warning("could not read %s: %s", env_path, e)
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip(); v = v.strip().strip('"').strip("'")
        if k and v and k not in os.environ:
            os.environ[k] = v


def get_settings() -> Dict[str, Any]:
    """Process-level settings. Provider keys, priority and timeout are read by ProviderRegistry."""
    return {
        "PORT": int(os.getenv("PORT", "5000")),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        "LOG_FORMAT": os.getenv("LOG_FORMAT", "text"),
        "GALLERY_PATH": os.getenv("GALLERY_PATH") or None,
    }
