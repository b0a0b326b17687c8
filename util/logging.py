"""
Structured logging for resource operations, audits, suggestions and
external collaborator failures.
"""

import logging
from typing import Any, Dict, List, Optional


class StructuredLogger:
    """Structured logger for resource store, audit and suggestion operations."""

    def __init__(self, name: str = "language_resources"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.info(message)

    def log_resource_operation(self, operation: str, resource_id: Any, key: Optional[str],
                               status: str = "success", details: Dict[str, Any] = None):
        """Log a resource store write."""
        log_details = {"resource_id": resource_id}
        if key is not None:
            log_details["key"] = key
        if details:
            log_details.update(details)

        self.log_operation(f"resource.{operation}", status, log_details)

    def log_search(self, query: str, filters: Dict[str, Any], total: int):
        """Log a search with a truncated query."""
        log_details = {"query": _truncate(query or "", 50), "total": total}
        log_details.update({k: v for k, v in filters.items() if v})

        self.log_operation("search", "success", log_details)

    def log_audit_run(self, audit_type: str, locale: Optional[str], details: Dict[str, Any] = None):
        """Log a document, text-list or repository audit."""
        log_details = {"locale": locale} if locale else {}
        if details:
            log_details.update({k: v for k, v in details.items() if v is not None})

        self.log_operation(f"audit.{audit_type}", "completed", log_details)

    def log_suggestion(self, source: str, confidence: float, degraded: bool = False):
        """Log which tier produced a suggestion."""
        log_details = {"source": source, "confidence": confidence}
        status = "degraded" if degraded else "success"

        self.log_operation("suggest", status, log_details)

    def log_validation_error(self, operation: str, errors: List[Any], source_record: Dict[str, Any] = None):
        """Log validation errors with sanitized details."""
        sanitized_errors = []
        for error in errors:
            if isinstance(error, dict):
                sanitized_error = error.copy()
                if "value" in sanitized_error:
                    sanitized_error["value"] = "[REDACTED]"
                sanitized_errors.append(sanitized_error)
            else:
                sanitized_errors.append(str(error)[:100])  # Limit error message length

        log_details = {
            "operation": operation,
            "errors": sanitized_errors,
            "error_count": len(sanitized_errors)
        }

        # Only identifiers, never texts
        if source_record and source_record.get("key"):
            log_details["target_identifier"] = source_record["key"]

        self.logger.warning(f"Operation: validation.error, Status: rejected, Details: {log_details}")

    def log_auth_failure(self, reason: str, path: str = ""):
        """Log a rejected x-secret check."""
        self.logger.warning(f"Operation: auth, Status: rejected, Details: {{'reason': '{reason}', 'path': '{path}'}}")

    def log_external_failure(self, service: str, error: str):
        """Log a failing external collaborator (model, store)."""
        self.logger.warning(f"Operation: external.{service}, Status: failed, Details: {{'error': '{_truncate(error, 200)}'}}")

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _truncate(value: str, limit: int) -> str:
    return value[:limit - 3] + "..." if len(value) > limit else value


# Global logger instance
logger = StructuredLogger()


def audit_event(event_type: str, identifiers: Dict[str, Any], payload: Dict[str, Any] = None,
                sensitive_fields: List[str] = None):
    """General audit event logging; long or sensitive payload values are trimmed."""
    if sensitive_fields is None:
        sensitive_fields = ['secret', 'password', 'x-secret']

    log_details = identifiers.copy() if identifiers else {}

    if payload:
        log_details["payload"] = sanitize_payload(payload, sensitive_fields=sensitive_fields)

    logger.log_operation(event_type.replace(".", "_"), "audit", log_details)


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging."""
    if sensitive_fields is None:
        sensitive_fields = ['secret', 'password', 'x-secret']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return _truncate(payload, 100)
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
