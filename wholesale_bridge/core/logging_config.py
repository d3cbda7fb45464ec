"""Structured JSON logging configuration."""

import contextvars
import logging
import re
import uuid

from pythonjsonlogger.json import JsonFormatter

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Shopify tokens (shpat_, shpca_, shpss_ ...) and key=value pairs naming a secret
_SECRET_PATTERNS = [
    re.compile(r"shp[a-z]{2}_[A-Za-z0-9]+"),
    re.compile(
        r"((?:access_token|client_secret|secret_key|secretKey)[\"']?\s*[:=]\s*[\"']?)[^\s\"',&}]+",
        re.IGNORECASE,
    ),
]
REDACTED = "[REDACTED]"


def redact(text: str) -> str:
    """Mask access tokens and shared secrets in a string."""
    text = _SECRET_PATTERNS[0].sub(REDACTED, text)
    return _SECRET_PATTERNS[1].sub(lambda m: m.group(1) + REDACTED, text)


class RequestIdFilter(logging.Filter):
    """Inject request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")  # type: ignore[attr-defined]
        return True


class SecretRedactionFilter(logging.Filter):
    """Rewrite the rendered message so secrets never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def setup_logging(*, debug: bool = False) -> None:
    """Configure root logger with JSON formatter, request-id and redaction filters."""
    handler = logging.StreamHandler()
    formatter = JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    )
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SecretRedactionFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def generate_request_id() -> str:
    """Generate a new request ID."""
    return uuid.uuid4().hex[:16]
