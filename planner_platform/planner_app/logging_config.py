"""JSON logging with per-request context."""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any
from uuid import uuid4

from flask import g, has_request_context, request

from .utils.identity import USER_HEADER

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64
# Chatty third-party loggers capped at WARNING.
QUIET_LOGGERS = ("urllib3", "werkzeug")


class RequestContextFilter(logging.Filter):
    """Stamp every record with the request id, route and caller."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", "n/a")
            record.path = request.path
            record.method = request.method
            record.user_id = request.headers.get(USER_HEADER, "-")
        else:
            record.request_id = record.path = record.method = record.user_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", self.converter(record.created))
        return f"{stamp}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "method", "path", "user_id"):
            payload[key] = getattr(record, key, "-")
        if record.exc_info:
            payload["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(app) -> None:
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    app.logger.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def assign_request_id() -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "") if has_request_context() else ""
    req_id = incoming.strip()[:MAX_REQUEST_ID_LENGTH] or uuid4().hex
    g.request_id = req_id
    return req_id
