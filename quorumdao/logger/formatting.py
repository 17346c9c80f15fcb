"""Root logger configuration with optional JSON-lines output."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from quorumdao.core.config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """JSON formatter emitting one object per record.

    Structured fields attached by :class:`~quorumdao.logger.AuditLogger` under
    ``extra_fields`` are merged into the top-level object.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        extra = getattr(record, "extra_fields", None)
        if extra:
            log_data.update(extra)
        return json.dumps(log_data, default=str)


def configure_logging(config: Optional[Settings] = None) -> logging.Logger:
    """Install handlers on the ``quorumdao`` logger according to ``config``.

    Calling this more than once replaces the previously installed handlers.
    """
    config = config or get_settings()
    logger = logging.getLogger("quorumdao")
    logger.setLevel(config.log_level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config.log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if config.log_file_enabled:
        path = Path(config.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
