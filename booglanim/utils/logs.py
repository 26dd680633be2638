# booglanim/utils/logs.py
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pathlib import Path

DEFAULT_AUDIT_LOG = "logs/builds.jsonl"


def get_logger(name: str = "booglanim") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _json_default(o: Any) -> Any:
    try:
        return str(o)
    except Exception:
        return None


def audit_log_path(path: Optional[str] = None) -> Path:
    return Path(path or os.getenv("BOOGLANIM_AUDIT_LOG") or DEFAULT_AUDIT_LOG)


def audit_event(step: str, status: str, path: Optional[str] = None, **fields: Any) -> None:
    """
    Append a structured JSON line to the audit log with ts, step, status, and extra fields.
    """
    target = audit_log_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    record: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        "step": step,
        "status": status,
    }
    if fields:
        record.update(fields)
    line = json.dumps(record, default=_json_default)
    with open(target, "a", encoding="utf-8") as fh:
        fh.write(line + "\n")
