"""
Structured logging with secret redaction.

Credentials must never reach log output: both the structlog event dict and
plain stdlib records are scrubbed before rendering.
"""

import logging
from typing import Any, Dict, Optional

import structlog

SENSITIVE_FIELDS = (
    "password",
    "password_hash",
    "passwd",
    "secret",
    "token",
    "credential",
    "api_key",
)

REDACTED = "{{REDACTED}}"


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name refers to a credential."""
    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in SENSITIVE_FIELDS)


def clean_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of data with sensitive values redacted, recursively."""
    cleaned = {}
    for key, value in data.items():
        if is_sensitive_field(str(key)):
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = clean_dict(value)
        elif isinstance(value, list):
            cleaned[key] = [clean_dict(item) if isinstance(item, dict) else item for item in value]
        else:
            cleaned[key] = value
    return cleaned


def redact_sensitive_fields(logger, method_name, event_dict):
    """structlog processor that redacts credential fields."""
    return clean_dict(event_dict)


class SecureLoggingFilter(logging.Filter):
    """Logging filter that redacts credential fields from stdlib records"""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, dict):
            record.args = clean_dict(record.args)
        elif record.args:
            record.args = tuple(
                clean_dict(arg) if isinstance(arg, dict) else arg for arg in record.args
            )

        for key in list(vars(record)):
            if is_sensitive_field(key):
                setattr(record, key, REDACTED)

        return True


class StructuredLogger:
    """Structured logging setup with secret redaction"""

    def __init__(
        self,
        service_name: str = "moneyledger",
        log_level: str = "INFO",
        json_output: bool = False,
    ):
        self.service_name = service_name
        self.log_level = log_level.upper()
        self.json_output = json_output
        self._setup_logging()

    def _setup_logging(self):
        """Setup structured logging with redaction"""
        renderer = (
            structlog.processors.JSONRenderer()
            if self.json_output
            else structlog.dev.ConsoleRenderer(colors=False)
        )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                redact_sensitive_fields,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(format="%(message)s")
        logging.getLogger(self.service_name).setLevel(getattr(logging, self.log_level))

        secure_filter = SecureLoggingFilter()
        for handler in logging.root.handlers:
            if not any(isinstance(f, SecureLoggingFilter) for f in handler.filters):
                handler.addFilter(secure_filter)

    def get_logger(self, name: str = None) -> structlog.stdlib.BoundLogger:
        """Get a structured logger instance"""
        return structlog.get_logger(name or self.service_name)


_structured_logger: Optional[StructuredLogger] = None


def get_structured_logger() -> StructuredLogger:
    """Get global structured logger instance"""
    global _structured_logger
    if _structured_logger is None:
        _structured_logger = StructuredLogger()
    return _structured_logger


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> StructuredLogger:
    """Reconfigure the global structured logger."""
    global _structured_logger
    _structured_logger = StructuredLogger(log_level=log_level, json_output=json_output)
    return _structured_logger


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """Convenience accessor used by module-level loggers."""
    return get_structured_logger().get_logger(name)
