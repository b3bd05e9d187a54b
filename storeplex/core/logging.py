# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Structured Logging — JSON lines with trace and tenant context.

Context fields are passed per call through ``extra=``:

    logger.warning("login rejected", extra={"tenant_id": 1001, "trace_id": tid})
"""

from __future__ import annotations

import json
import logging
import sys

_CONTEXT_FIELDS = ("trace_id", "tenant_id", "user_id")


class StructuredFormatter(logging.Formatter):
    """JSON log formatter with trace/tenant/user context."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            val = getattr(record, key, None)
            if val is not None and val != "":
                log_entry[key] = val

        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Route every logger through a single JSON handler on stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn installs its own handlers; let records bubble up to ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True
