"""Centralized helpers for keeping statement and error text log-friendly."""

import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Dumps routinely carry credentials in INSERT rows (users tables, config tables)
SENSITIVE_PATTERNS = [
    r"password\s*[:=]\s*['\"]?([^'\"\s,]+)['\"]?",
    r"api[_-]?key\s*[:=]\s*['\"]?([^'\"\s,]+)['\"]?",
    r"secret\s*[:=]\s*['\"]?([^'\"\s,]+)['\"]?",
    r"token\s*[:=]\s*['\"]?([^'\"\s,]+)['\"]?",
    r"mysql://[^:]+:([^@]+)@",  # Database password in URL
    r"postgresql://[^:]+:([^@]+)@",
]


def sanitize_error_message(message: str) -> str:
    """
    Sanitize a message to remove potentially sensitive data.

    Args:
        message: The message to sanitize

    Returns:
        Sanitized message with sensitive data masked
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: (
                m.group(0).replace(m.group(1), "***REDACTED***")
                if m.lastindex
                else m.group(0)
            ),
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def statement_preview(statement: str, max_length: int = 100) -> str:
    """
    Leading text of a statement on a single line, for warnings and reports.

    Args:
        statement: SQL statement text
        max_length: Maximum number of characters kept

    Returns:
        Whitespace-collapsed, sanitized prefix, with "..." when cut
    """
    flattened = " ".join(statement.split())
    flattened = sanitize_error_message(flattened)
    if len(flattened) > max_length:
        return flattened[:max_length] + "..."
    return flattened


def truncate_error_message(error: Exception, max_length: int = 200) -> str:
    """
    Truncate long error messages to keep logs clean and prevent information leakage.

    Also sanitizes sensitive data from error messages.

    Args:
        error: The exception to format
        max_length: Maximum length of the error message

    Returns:
        Truncated and sanitized error message
    """
    error_str = sanitize_error_message(str(error))

    if len(error_str) > max_length:
        error_str = error_str[:max_length] + "..."

    return error_str


def safe_log_warning(
    logger_instance: logging.Logger,
    message: str,
    extra: Optional[Dict[str, Any]] = None,
    **kwargs
) -> None:
    """
    Safely log a warning message, ensuring no sensitive data is exposed.

    Args:
        logger_instance: The logger instance to use
        message: The warning message (will be sanitized)
        extra: Additional context to log
        **kwargs: Additional keyword arguments for logging
    """
    sanitized_extra = None
    if extra:
        sanitized_extra = {
            key: sanitize_error_message(value) if isinstance(value, str) else value
            for key, value in extra.items()
        }

    logger_instance.warning(
        sanitize_error_message(message), extra=sanitized_extra, **kwargs
    )
