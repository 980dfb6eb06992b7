"""Sanitized logging helpers for duplicate detection.

Report descriptions and store responses can carry reporter emails, API keys
and signed image URLs, so every structured context is scrubbed before it
reaches the log output.
"""
import json
import logging
import re
from typing import Any

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('civic-dedup')


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    # Email addresses
    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # JWTs (Supabase anon/service keys)
    text = re.sub(r'eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+', '<jwt>', text)

    # Google API keys
    text = re.sub(r'AIza[0-9A-Za-z_-]{35}', '<api-key>', text)

    # URLs (signed storage links, project hosts)
    text = re.sub(r'https?://[^\s"]+', '<url>', text)

    # UUIDs
    text = re.sub(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '<uuid>', text, flags=re.IGNORECASE)

    # Long opaque strings (tokens, hashes)
    text = re.sub(r'[a-zA-Z0-9]{32,}', '<token>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Serialize an object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    sanitized = sanitize_text(json_str)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "... [truncated]"
    return sanitized


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_duplicate_detection(score: float, existing_id: str, **kwargs) -> None:
    """Log a retained duplicate candidate.

    Args:
        score: Composite similarity score
        existing_id: Identifier of the existing issue
        **kwargs: Additional context
    """
    log_warning("Possible duplicate report",
                similarity_score=round(score, 4),
                existing_issue=existing_id,
                **kwargs)


def set_log_level(level: str) -> None:
    """Apply a textual log level (``"DEBUG"``, ``"INFO"``...) to the package logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
