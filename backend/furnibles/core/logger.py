"""JSON logging with per-request correlation ids and an access line per request."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
MAX_REQUEST_ID_LENGTH = 128

# ``extra={...}`` keys copied into the JSON payload
EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "method",
    "path",
    "status",
    "user_id",
    "order_id",
    "product_id",
    "review_id",
    "event_id",
    "event_type",
    "count",
)

# Probes hit these every few seconds; keep them out of the access log.
QUIET_ENDPOINTS = frozenset({"health.healthcheck", "static"})

access_log = logging.getLogger("furnibles.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with whitelisted extras."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp every record with the current ``request_id`` (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the request's correlation id.

    An inbound ``X-Request-ID``/``X-Correlation-ID`` is reused, truncated to
    ``MAX_REQUEST_ID_LENGTH``; otherwise a UUID4 is minted and cached on ``g``.
    """

    if not has_request_context():
        return str(uuid4())
    if hasattr(g, "request_id"):
        return g.request_id  # type: ignore[return-value]
    request_id = next(
        (request.headers[h].strip() for h in CORRELATION_HEADERS if request.headers.get(h)),
        "",
    )[:MAX_REQUEST_ID_LENGTH] or str(uuid4())
    g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Send the root logger to stdout as JSON at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else level.upper()
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed request ids, echo them back, and write one access line per request."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:  # pragma: no cover - integration glue
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response):  # pragma: no cover - integration glue
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        if request.endpoint not in QUIET_ENDPOINTS:
            started = g.get("request_started", time.perf_counter())
            access_log.info(
                "request.completed",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id"]
