"""
Logging configuration for FairGate.

Provides structured JSON logging for audit trails and debugging.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

SENSITIVE_FIELDS = ["signature", "secret", "permit_secret", "token", "challenge_token", "permit", "api_key", "fairkey"]


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in a consistent JSON format suitable for
    log aggregation systems like ELK, Splunk, or CloudWatch.
    """

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


def sanitize_for_logging(data: Dict[str, Any], sensitive_fields: List[str] = None) -> Dict[str, Any]:
    """
    Sanitize data for logging by masking sensitive fields.

    Args:
        data: The data to sanitize
        sensitive_fields: List of field names to mask

    Returns:
        Sanitized copy of the data
    """
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    result = {}
    for key, value in data.items():
        if key in sensitive_fields:
            if isinstance(value, str) and len(value) > 16:
                result[key] = value[:4] + "..." + value[-4:]
            else:
                result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = sanitize_for_logging(value, sensitive_fields)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_logging(item, sensitive_fields) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


class AuditLogger:
    """
    Specialized logger for audit events.

    Provides methods for logging challenge issuance, permit decisions,
    gated-action admission, and security-relevant failures.
    """

    def __init__(self, name: str = "fairgate.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        """Internal logging method with extra fields."""
        if not self._logger.isEnabledFor(level):
            return
        message = kwargs.pop("message", "")
        extra = {
            "event_type": event_type,
            "request_id": request_id_var.get(),
            **sanitize_for_logging(kwargs)
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {message}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def challenge_issued(self, wallet: str, nonce: str, expires_at: int) -> None:
        self._log(
            logging.INFO,
            "CHALLENGE_ISSUED",
            wallet=wallet,
            nonce=nonce,
            expires_at=expires_at,
            message=f"Challenge issued for {wallet}"
        )

    def permit_issued(
        self,
        wallet: str,
        nonce: str,
        tier: str,
        score: float,
        expires_at: int
    ) -> None:
        self._log(
            logging.INFO,
            "PERMIT_ISSUED",
            wallet=wallet,
            nonce=nonce,
            tier=tier,
            score=score,
            expires_at=expires_at,
            message=f"Permit issued: {tier}"
        )

    def permit_denied(self, wallet: str, tier: str, score: float) -> None:
        """Log a policy denial (valid request, score too low)."""
        self._log(
            logging.WARNING,
            "PERMIT_DENIED",
            wallet=wallet,
            tier=tier,
            score=score,
            message=f"Permit denied by policy: {tier}"
        )

    def authentication_failure(self, stage: str, reason: str, wallet: Optional[str] = None) -> None:
        self._log(
            logging.WARNING,
            "AUTHENTICATION_FAILURE",
            stage=stage,
            reason=reason,
            wallet=wallet,
            message=f"{stage} rejected: {reason}"
        )

    def upstream_failure(self, wallet: str, reason: str, **details) -> None:
        self._log(
            logging.ERROR,
            "UPSTREAM_FAILURE",
            wallet=wallet,
            reason=reason,
            **details,
            message=f"Score lookup failed: {reason}"
        )

    def mint_authorized(self, wallet: str, nonce: str, mint_id: str) -> None:
        self._log(
            logging.INFO,
            "MINT_AUTHORIZED",
            wallet=wallet,
            permit_nonce=nonce,
            mint_id=mint_id,
            message=f"Mint authorized for {wallet}"
        )

    def mint_rejected(self, reason: str) -> None:
        self._log(
            logging.WARNING,
            "MINT_REJECTED",
            reason=reason,
            message=f"Mint rejected: {reason}"
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
    Install a single stdout handler (plus an optional file handler) on the
    root logger. Calling it again replaces the previous handlers.
    """
    formatter: logging.Formatter = StructuredFormatter() if json_format else logging.Formatter(
        '%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # urllib3 logs full request URLs, including wallet query strings, at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set the request ID for the current context.

    Args:
        request_id: Request ID to set, or None to generate one

    Returns:
        The request ID that was set
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
