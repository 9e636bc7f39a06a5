import re
import sys
import structlog
import logging
from typing import Any, cast
from app.shared.core.config import get_settings

_SENSITIVE_FIELDS = {
    "password",
    "secret",
    "token",
    "authorization",
    "api_key",
    "access_key",
    "smtp_password",
    "aws_secret_access_key",
    "aws_session_token",
}
_SENSITIVE_SUFFIXES = ("_token", "_secret", "_password", "_key")
_EMAIL_REGEX = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")


def _is_sensitive_key(key: Any) -> bool:
    key_norm = str(key).lower().strip().replace("-", "_")
    if key_norm in _SENSITIVE_FIELDS:
        return True
    if key_norm.endswith(_SENSITIVE_SUFFIXES):
        return True
    return any(fragment in key_norm for fragment in ("secret", "password", "token"))


def secret_redactor(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Recursively redact credentials and mail addresses from log events.
    AWS keys and SMTP passwords pass through settings, so they must never
    reach the renderer.
    """

    def redact_recursive(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: ("[REDACTED]" if _is_sensitive_key(k) else redact_recursive(v))
                for k, v in data.items()
            }
        elif isinstance(data, list):
            return [redact_recursive(item) for item in data]
        elif isinstance(data, str):
            return _EMAIL_REGEX.sub("[EMAIL_REDACTED]", data)
        return data

    redacted = redact_recursive(event_dict)
    if isinstance(redacted, dict):
        return cast(dict[str, Any], redacted)
    return {}


def _renderer_chain(debug: bool) -> tuple[list[Any], int]:
    """Console output while debugging, one JSON object per line otherwise."""
    if debug:
        return [structlog.dev.ConsoleRenderer()], logging.DEBUG
    return [
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ], logging.INFO


def setup_logging() -> None:
    renderers, level = _renderer_chain(get_settings().DEBUG)
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        secret_redactor,
    ]

    structlog.configure(
        processors=cast(Any, shared_processors + renderers),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn, apscheduler and botocore log through the stdlib.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
