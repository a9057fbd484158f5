"""
Structured logging for the storefront.

Every event carries the request it belongs to, the signed-in caller once the
session cookie has been verified, and the GraphQL operation being executed.
Values under password or token keys are masked before rendering.
"""

import logging
import secrets
import sys
from contextvars import ContextVar
from typing import Any
from uuid import UUID

import structlog

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_user_id: ContextVar[str | None] = ContextVar("user_id", default=None)
_operation: ContextVar[str | None] = ContextVar("operation", default=None)

_CONTEXT_VARS = {"request_id": _request_id, "user_id": _user_id, "operation": _operation}

SENSITIVE_KEY_PARTS = ("password", "token", "secret")
REDACTED = "[REDACTED]"


def is_sensitive_key(key: str) -> bool:
    """True for keys such as ``password``, ``confirmPassword`` or ``resetToken``."""
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def redact(value: Any) -> Any:
    """Return ``value`` with every sensitive mapping key masked, at any depth."""
    if isinstance(value, dict):
        return {
            key: REDACTED if isinstance(key, str) and is_sensitive_key(key) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item) for item in value]
    return value


def add_request_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: merge the bound request context into the event."""
    for key, var in _CONTEXT_VARS.items():
        value = var.get()
        if value is not None:
            event_dict.setdefault(key, value)
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: never render passwords or tokens."""
    return {
        key: value if key == "event" else (REDACTED if is_sensitive_key(key) else redact(value))
        for key, value in event_dict.items()
    }


def configure_logging(debug: bool = False) -> None:
    """Route structlog through stdlib logging on stdout.

    Debug mode renders for humans; otherwise one JSON object per line.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )

    renderer = structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_context,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(request_id: str | None = None) -> str:
    """Start a fresh request context and return its id."""
    clear_request_context()
    request_id = request_id or secrets.token_urlsafe(9)
    _request_id.set(request_id)
    return request_id


def bind_user(user_id: UUID | str | None) -> None:
    """Attach the verified caller to everything logged for the rest of the request."""
    _user_id.set(str(user_id) if user_id is not None else None)


def bind_operation(operation: str | None) -> None:
    _operation.set(operation)


def clear_request_context() -> None:
    for var in _CONTEXT_VARS.values():
        var.set(None)


def current_request_context() -> dict[str, str]:
    """The non-empty request context values, keyed as they appear in events."""
    return {key: value for key, var in _CONTEXT_VARS.items() if (value := var.get()) is not None}
