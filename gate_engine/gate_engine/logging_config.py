"""Logging setup.

By default records are written as plain text.  With
``FEATUREGATE_STRUCTURED_LOGGING=true`` the root handler is replaced with a
``StreamHandler`` that emits one JSON object per line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "INFO",
        "logger": "gate_engine.context.deployment",
        "message": "Deployment plan set to cloud (mode=server)",
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gate_engine.config import GateSettings

_TEXT_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        feature = getattr(record, "feature", None)
        if feature is not None:
            payload["feature"] = feature

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: GateSettings) -> None:
    """Install the root log handler described by *settings*."""
    level = logging.DEBUG if settings.debug else logging.INFO

    if settings.structured_logging:
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)
        root_logger.setLevel(level)
        return

    logging.basicConfig(level=level, format=_TEXT_FORMAT)
