"""JSON logging for the trust verifier service.

One JSON object per line on stdout, optionally mirrored to TRUST_LOG_FILE.
Request and verifier context is attached through ``extra=``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Keys copied from ``extra=`` into the JSON payload when present
CONTEXT_KEYS = ("request_id", "route", "remote_addr", "verifier", "status")


class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({k: getattr(record, k) for k in CONTEXT_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _handler(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(JsonFormatter())
    return handler


def configure_logging():
    """Install JSON handlers on the root logger (TRUST_LOG_LEVEL, default INFO)."""
    handlers = [_handler(logging.StreamHandler(sys.stdout))]

    log_file = os.getenv("TRUST_LOG_FILE")
    if log_file:
        handlers.append(_handler(logging.FileHandler(log_file, mode="a")))

    root = logging.getLogger()
    root.setLevel(getattr(logging, os.getenv("TRUST_LOG_LEVEL", "INFO").upper(), logging.INFO))
    root.handlers = handlers

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
