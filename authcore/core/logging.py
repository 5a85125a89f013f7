"""Structured log events with a per-operation correlation id (stdlib logging)."""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Correlation id for the operation currently running in this context.
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# detail keys containing any of these are dropped before logging.
SECRET_KEY_MARKERS = ("password", "secret", "token", "hash", "authorization")

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s [cid=%(correlation_id)s account=%(account_id)s] "
    "%(message)s%(detail_suffix)s"
)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def new_correlation_id() -> str:
    """Generate a correlation id and make it current for this context."""
    cid = uuid.uuid4().hex
    correlation_id_var.set(cid)
    return cid


def scrub_detail(detail: dict[str, Any] | None) -> dict[str, Any]:
    """Return a copy of detail without keys that look like they carry secret material."""
    if not detail:
        return {}
    return {
        k: v
        for k, v in detail.items()
        if not any(marker in k.lower() for marker in SECRET_KEY_MARKERS)
    }


class EventContextFilter(logging.Filter):
    """Make sure every record has the fields LOG_FORMAT references."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id") or record.correlation_id is None:
            record.correlation_id = get_correlation_id() or "-"
        if not hasattr(record, "account_id") or record.account_id is None:
            record.account_id = "-"
        detail = getattr(record, "detail", None)
        record.detail_suffix = f" {detail}" if detail else ""
        return True


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger with the event format. Idempotent."""
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        if getattr(handler, "_authcore", False):
            return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(EventContextFilter())
    handler._authcore = True  # type: ignore[attr-defined]
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    correlation_id: str | None = None,
    account_id: int | None = None,
    detail: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """Emit one structured event: {level, message, correlation_id, account_id, detail}."""
    logger.log(
        level,
        message,
        exc_info=exc_info,
        extra={
            "correlation_id": correlation_id or get_correlation_id(),
            "account_id": account_id,
            "detail": scrub_detail(detail),
        },
    )
