"""Structured logging for loancore.

Two streams are configured: ``loancore`` for operational records and
``loancore.audit`` for refused or denied domain actions. Records carry the
request id and acting role, either from the current context or from the
record itself when the emitting code knows which role it evaluated.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Optional

from loancore.core.context import get_actor_role, get_request_id
from loancore.core.settings import settings

ROOT_LOGGER = "loancore"
AUDIT_LOGGER = "loancore.audit"
_UNSET = "-"


class RequestContextFilter(logging.Filter):
    """Fill in ``request_id`` and ``actor_role`` unless the record already names them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) in (None, _UNSET):
            record.request_id = get_request_id()
        if getattr(record, "actor_role", None) in (None, _UNSET):
            record.actor_role = get_actor_role()
        return True


class JsonFormatter(logging.Formatter):
    def __init__(self, stream_label: str = "transactional") -> None:
        super().__init__()
        self.stream_label = stream_label

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stream": self.stream_label,
            "request_id": getattr(record, "request_id", _UNSET),
            "actor_role": getattr(record, "actor_role", _UNSET),
        }
        action = getattr(record, "audit_action", None)
        if action is not None:
            payload["action"] = action
            payload["resource_type"] = getattr(record, "resource_type", None)
            payload["details"] = getattr(record, "audit_details", {})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _stream_handler(formatter: str, level: str) -> dict:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "filters": ["request_context"],
        "stream": "ext://sys.stdout",
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Install JSON handlers on the loancore loggers. Call once from the embedding application."""
    log_level = (level or settings.log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {
                "json": {"()": JsonFormatter, "stream_label": "transactional"},
                "audit_json": {"()": JsonFormatter, "stream_label": "audit"},
            },
            "handlers": {
                "default": _stream_handler("json", log_level),
                "audit": _stream_handler("audit_json", log_level),
            },
            "loggers": {
                ROOT_LOGGER: {"handlers": ["default"], "level": log_level, "propagate": False},
                AUDIT_LOGGER: {"handlers": ["audit"], "level": log_level, "propagate": False},
            },
        }
    )
    logging.getLogger(ROOT_LOGGER).info("Logging configured for environment=%s", settings.environment)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER)


def _build_summary(action: str, details: dict[str, Any]) -> str:
    if not details:
        return action
    keys = list(details.keys())
    snippet = ", ".join(f"{key}={details[key]}" for key in keys[:3])
    suffix = "..." if len(keys) > 3 else ""
    return f"{action}: {snippet}{suffix}"


def record_audit_event(
    action: str,
    *,
    resource_type: str,
    actor_role: str | None = None,
    details: dict[str, Any] | None = None,
    level: int = logging.WARNING,
) -> None:
    """Write one structured record to the audit stream.

    ``actor_role`` overrides the role held in the request context for this
    record only.
    """
    payload = dict(details or {})
    extra = {
        "audit_action": action,
        "resource_type": resource_type,
        "audit_details": payload,
    }
    if actor_role is not None:
        extra["actor_role"] = actor_role
    get_audit_logger().log(level, _build_summary(action, payload), extra=extra)
