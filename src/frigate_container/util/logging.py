from __future__ import annotations
import logging, os, sys
from typing import Optional

LOG_LEVEL_ENV = "FRIGATE_CONTAINER_LOG_LEVEL"

def resolve_level(level: Optional[str], default: str = "INFO") -> int:
    """CLI flag, then FRIGATE_CONTAINER_LOG_LEVEL, then default. Unknown names mean INFO."""
    name = str(level or os.environ.get(LOG_LEVEL_ENV) or default).upper()
    lvl = logging.getLevelName(name)
    return lvl if isinstance(lvl, int) else logging.INFO

def setup_logger(name: str = "frigate_container", level: Optional[str] = None,
                 default: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level, default))
    if not logger.handlers:
        # stderr: stdout carries rendered output and rich tables
        h = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", "%H:%M:%S")
        h.setFormatter(fmt)
        logger.addHandler(h)
    return logger
