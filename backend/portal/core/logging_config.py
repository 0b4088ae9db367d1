"""Structured logging configuration.

Emits JSON log lines suitable for any JSON log aggregation system
(ELK, CloudWatch, Datadog, ...).

All logs include:
- ISO8601 timestamp
- Log level
- Logger name
- Event type (for filtering)
- Additional structured data

Security events (PIN gate, share links, terms acceptance) are tagged so
alerting rules can key on them. Share tokens are redacted from every record
before it is formatted.
"""

import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import jsonlogger

from portal.core.config import settings

# token=<value> in query strings and share URLs
TOKEN_QUERY_PATTERN = re.compile(r"(token=)[^&\s\"']+")
TOKEN_REDACTED = "[TOKEN_REDACTED]"


def redact_tokens(text: str) -> str:
    """Replace token query values with a redaction marker."""
    return TOKEN_QUERY_PATTERN.sub(rf"\1{TOKEN_REDACTED}", text)


class PortalJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service metadata and event_type to every record."""

    def __init__(self, *args, **kwargs):
        super().__init__(
            *args,
            fmt='%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={
                'asctime': '@timestamp',
                'levelname': 'level',
                'name': 'logger',
            },
            **kwargs
        )

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['@timestamp'] = datetime.now(timezone.utc).isoformat()

        log_record['service'] = {
            'name': settings.APP_NAME,
            'version': settings.APP_VERSION,
            'environment': settings.ENVIRONMENT,
        }

        if 'level' in log_record:
            log_record['level'] = log_record['level'].upper()

        if 'event_type' not in log_record:
            log_record['event_type'] = f"log.{record.name}"

        log_record['source'] = {
            'file': record.pathname,
            'line': record.lineno,
            'function': record.funcName,
        }


class SecurityEventFilter(logging.Filter):
    """Tag security-relevant records with is_security_event."""

    SECURITY_LOGGERS = {
        'security.auth',
        'security.access',
    }

    SECURITY_KEYWORDS = {
        'pin', 'lockout', 'authentication', 'authorization',
        'denied', 'token', 'session', 'share link', 'terms',
    }

    def filter(self, record: logging.LogRecord) -> bool:
        is_security_logger = any(
            record.name.startswith(logger)
            for logger in self.SECURITY_LOGGERS
        )

        msg_lower = str(record.getMessage()).lower()
        has_security_keyword = any(
            keyword in msg_lower
            for keyword in self.SECURITY_KEYWORDS
        )

        if not getattr(record, 'is_security_event', False):
            record.is_security_event = is_security_logger or has_security_keyword

        return True


class TokenRedactionFilter(logging.Filter):
    """Redact share/access tokens from log messages and arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_tokens(record.msg)

        if record.args:
            if isinstance(record.args, tuple):
                record.args = tuple(
                    redact_tokens(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
            elif isinstance(record.args, dict):
                record.args = {
                    k: redact_tokens(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }

        return True


def configure_logging(level: int = logging.INFO) -> None:
    """Configure JSON logging on the root and uvicorn loggers.

    Call this at application startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = PortalJsonFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(TokenRedactionFilter())
    console_handler.addFilter(SecurityEventFilter())
    root_logger.addHandler(console_handler)

    # uvicorn access lines carry full request URLs, including ?token=
    for logger_name in ['uvicorn', 'uvicorn.error', 'uvicorn.access']:
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler.addFilter(TokenRedactionFilter())
        logger.addHandler(handler)
        logger.propagate = False

    logging.info(
        "Logging configured",
        extra={
            "event_type": "system.startup.logging_configured",
            "log_level": logging.getLevelName(level),
        }
    )


def format_security_event(
    event_type: str,
    severity: str,
    description: str,
    actor: str | None = None,
    ip_address: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    metadata: dict | None = None,
) -> dict:
    """Format a security event for structured logging.

    Returns a dict suitable for logger.info(..., extra=...).

    Usage:
        logger.info(
            "Share link created",
            extra=format_security_event(
                event_type="security.access.share_link_created",
                severity="info",
                description="Share link issued",
                actor=producer.email,
                resource_type="shoot",
                resource_id=shoot.id,
            )
        )
    """
    event = {
        "event_type": event_type,
        "severity": severity,
        "description": description,
        "is_security_event": True,
    }

    if actor:
        event["actor"] = actor
    if ip_address:
        event["ip_address"] = ip_address
    if resource_type:
        event["resource_type"] = resource_type
    if resource_id:
        event["resource_id"] = resource_id
    if metadata:
        event["metadata"] = metadata

    return event
