# taskgrid/logging.py
import logging
import os
from typing import Any, Dict, Optional

BULKY_KEYS = {"content"}


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def summarize_args(args: Dict[str, Any]) -> Dict[str, Any]:
    """File contents never reach the log; only their size does."""
    safe: Dict[str, Any] = {}
    for k, v in args.items():
        if k in BULKY_KEYS and isinstance(v, str):
            safe[k] = f"<{len(v)} chars>"
        else:
            safe[k] = v
    return safe


def log_tool_call(logger: logging.Logger, name: str, args: Dict[str, Any]):
    logger.info("tool_call %s %s", name, summarize_args(args))
