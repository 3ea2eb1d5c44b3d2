"""
Logging configuration for HyperLink.

Provides structured JSON logging and audit events for link creation,
link parsing and rotations. Secrets, seeds and URL fragments are never
passed to the logger; events carry versions, base58 addresses, amounts
and transaction signatures only.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable tying together the events of one rotation
correlation_id_var: ContextVar[str] = ContextVar('correlation_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record.
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        log_data = {
            "ts": f"{stamp}.{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Audit records are built without a call site
        if record.lineno:
            log_data["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

        correlation_id = correlation_id_var.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


class AuditLogger:
    """
    Logger for audit events of the identity subsystem.

    Each method maps to one event type. Callers pass public material only.
    """

    def __init__(self, name: str = "hyperlink.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return

        extra = {
            "event_type": event_type,
            "correlation_id": correlation_id_var.get(),
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

    def link_created(self, address: str, version: int) -> None:
        self._log(
            logging.INFO,
            "LINK_CREATED",
            address=address,
            version=version,
            message=f"Created v{version} link for {address}"
        )

    def link_opened(self, address: str, version: int) -> None:
        self._log(
            logging.DEBUG,
            "LINK_OPENED",
            address=address,
            version=version,
            message=f"Opened v{version} link for {address}"
        )

    def link_rejected(self, reason: str) -> None:
        self._log(
            logging.WARNING,
            "LINK_REJECTED",
            reason=reason,
            message=f"Link rejected: {reason}"
        )

    def rotation_requested(
        self,
        source: str,
        balance: int,
        fee: int,
        destination: Optional[str] = None
    ) -> None:
        """Log a rotation or sweep request before any transfer is built."""
        self._log(
            logging.INFO,
            "ROTATION_REQUESTED",
            source=source,
            destination=destination,
            balance=balance,
            fee=fee,
            message=f"Rotation requested for {source}"
        )

    def transfer_submitted(
        self,
        source: str,
        destination: str,
        lamports: int,
        signature: str
    ) -> None:
        self._log(
            logging.INFO,
            "TRANSFER_SUBMITTED",
            source=source,
            destination=destination,
            lamports=lamports,
            signature=signature,
            message=f"Transfer {signature} submitted"
        )

    def rotation_confirmed(
        self,
        source: str,
        destination: str,
        lamports: int,
        signature: Optional[str]
    ) -> None:
        self._log(
            logging.INFO,
            "ROTATION_CONFIRMED",
            source=source,
            destination=destination,
            lamports=lamports,
            signature=signature,
            message=f"Moved {lamports} lamports from {source} to {destination}"
        )

    def rotation_failed(
        self,
        source: str,
        destination: str,
        reason: str,
        signature: Optional[str] = None
    ) -> None:
        self._log(
            logging.ERROR,
            "ROTATION_FAILED",
            source=source,
            destination=destination,
            reason=reason,
            signature=signature,
            message=f"Rotation from {source} failed: {reason}"
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
        json_format: Use JSON formatting
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # stderr keeps stdout free for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: ID to set, or None to generate one

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get the current correlation ID."""
    return correlation_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
