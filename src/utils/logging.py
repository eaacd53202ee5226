"""Structured JSON logging configuration."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

SERVICE_NAME = "users-service"

# Extras whose key contains one of these never reach the log stream
_SENSITIVE_MARKERS = ('password', 'token', 'jwt', 'secret', 'hash')
_REDACTED = '[REDACTED]'


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    # LogRecord attributes that are not user-supplied extras
    _STANDARD_ATTRS = frozenset(
        vars(logging.LogRecord('', 0, '', 0, '', (), None)).keys()
    ) | {'message', 'asctime', 'taskName'}

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # logger.info("...", extra={"userId": "123"}) lands in record.__dict__
        for key, value in record.__dict__.items():
            if key in self._STANDARD_ATTRS or callable(value):
                continue
            log_data[key] = _REDACTED if _is_sensitive(key) else value

        return json.dumps(log_data, default=str)


def setup_structured_logging(level: str = "INFO") -> None:
    """Route every logger, uvicorn's included, through the JSON formatter."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.handlers = [handler]
    uvicorn_access.setLevel(logging.WARNING)

    logging.getLogger('pymongo').setLevel(logging.WARNING)
