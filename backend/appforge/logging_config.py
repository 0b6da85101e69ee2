import logging
import sys
import json
from typing import Any, Optional

from .config import settings

# Attributes callers may attach through the "extra" kwarg
EXTRA_FIELDS = ("request_id", "user_id", "user_account", "app_id", "count", "path", "error_code")

class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)

def setup_logging(level: Optional[str] = None):
    """
    Configure root logger to output JSON to stdout.
    """
    logger = logging.getLogger()
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    # Replace handlers installed by uvicorn or a previous call
    logger.handlers = []
    logger.addHandler(handler)

    # SQL echo goes through our handler instead of SQLAlchemy's own
    logging.getLogger("sqlalchemy.engine").propagate = True
    logging.getLogger("uvicorn.access").handlers = []
    logging.getLogger("uvicorn.access").propagate = True
