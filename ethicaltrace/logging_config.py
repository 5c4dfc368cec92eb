"""
Logging configuration for EthicalTrace.

Provides structured JSON logging and an audit logger that records every
mutating store operation, accepted or rejected.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """JSON formatter: one object per line, suitable for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Specialized logger for registry audit events.

    Records accepted and rejected mutations, admin transfers and
    security-relevant events from the service layer.
    """

    def __init__(self, name: str = "ethicaltrace.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        extra = {
            "event_type": event_type,
            "request_id": request_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def mutation_applied(
        self,
        store: str,
        operation: str,
        caller: str,
        block_height: int,
        **details: Any
    ) -> None:
        """Log a mutation that changed store state."""
        self._log(
            logging.INFO,
            "MUTATION_APPLIED",
            store=store,
            operation=operation,
            caller=caller,
            block_height=block_height,
            **details,
            message=f"{store}.{operation} applied"
        )

    def mutation_rejected(
        self,
        store: str,
        operation: str,
        caller: str,
        block_height: int,
        error: Dict[str, Any],
        **details: Any
    ) -> None:
        """Log a mutation refused with a domain error."""
        self._log(
            logging.WARNING,
            "MUTATION_REJECTED",
            store=store,
            operation=operation,
            caller=caller,
            block_height=block_height,
            error=error,
            **details,
            message=f"{store}.{operation} rejected: {error.get('name')}"
        )

    def admin_transferred(
        self,
        store: str,
        previous_admin: str,
        new_admin: str
    ) -> None:
        self._log(
            logging.WARNING,
            "ADMIN_TRANSFERRED",
            store=store,
            previous_admin=previous_admin,
            new_admin=new_admin,
            message=f"{store} admin transferred"
        )

    def security_event(
        self,
        event: str,
        severity: str = "medium",
        **details
    ) -> None:
        """Log a security-relevant event."""
        level = {
            "low": logging.INFO,
            "medium": logging.WARNING,
            "high": logging.ERROR,
            "critical": logging.CRITICAL
        }.get(severity, logging.WARNING)

        self._log(
            level,
            "SECURITY_EVENT",
            security_event=event,
            severity=severity,
            **details,
            message=f"Security event: {event}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request ID for the current context, generating one if None."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


# Global audit logger instance
audit_log = AuditLogger()
