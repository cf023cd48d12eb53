"""Structured logging configuration using structlog.

The receiver secret travels in the ``key`` query parameter, so every path that
can put a URL or a secret into a log line goes through redaction here: the
structlog processor chain for our own events and a stdlib filter for the
uvicorn access log.
"""

import logging
import re
import sys

import structlog

REDACTED = "[redacted]"

_SENSITIVE_FIELDS = {"key", "secret", "secret_key", "expected_key", "supplied_key"}
_KEY_PARAM = re.compile(r"(?i)([?&]key=)[^&\s\"']*")


def redact_query_key(text: str) -> str:
    """Replace the value of any ``key`` query parameter in ``text``."""
    return _KEY_PARAM.sub(rf"\g<1>{REDACTED}", text)


def _redact_event(_logger, _method_name: str, event_dict: dict) -> dict:
    for name in _SENSITIVE_FIELDS.intersection(event_dict):
        event_dict[name] = REDACTED
    for name in ("url", "path", "query"):
        value = event_dict.get(name)
        if isinstance(value, str):
            event_dict[name] = redact_query_key(value)
    return event_dict


class QueryKeyRedactingFilter(logging.Filter):
    """Scrub ``key=...`` out of access-log records before they are formatted."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact_query_key(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        if isinstance(record.msg, str):
            record.msg = redact_query_key(record.msg)
        return True


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: If True, output JSON (production). If False, colored console (dev).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_event,
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.addFilter(QueryKeyRedactingFilter())
    access_logger.setLevel(logging.WARNING)


def bind_request_context(trace_id: str, receiver: str | None = None, receiver_id: str | None = None) -> None:
    """Bind contextual variables to the current async context."""
    ctx = {"trace_id": trace_id}
    if receiver:
        ctx["receiver"] = receiver
    if receiver_id:
        ctx["receiver_id"] = receiver_id
    structlog.contextvars.bind_contextvars(**ctx)


def clear_request_context() -> None:
    """Clear bound context variables after a request."""
    structlog.contextvars.clear_contextvars()
