"""Structured logging utilities."""
import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional

LOGGER_NAME = "mapsearch"


def setup_logging(level: str = "INFO"):
    """Setup structured JSON logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(message)s',
        handlers=[logging.StreamHandler()]
    )


def log_structured(level: str, message: str, **kwargs):
    """
    Log structured JSON message.
    
    Args:
        level: Log level (info, warning, error, etc.)
        message: Log message
        **kwargs: Additional structured fields
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level.upper(),
        "message": message,
        **kwargs
    }
    
    logger = logging.getLogger(LOGGER_NAME)
    getattr(logger, level.lower(), logger.info)(json.dumps(log_entry, default=str))


def log_error(error: BaseException, context: Optional[Dict[str, Any]] = None, level: str = "error"):
    """
    Log an exception with its traceback and calling context.
    
    The exception is also forwarded to Sentry when error tracking is enabled.
    
    Args:
        error: Exception to record
        context: Extra fields describing where it happened (module, function, ...)
        level: Log level to emit at
    """
    from mapsearch.utils.error_tracking import capture_exception

    context = context or {}
    log_structured(
        level,
        f"{type(error).__name__}: {error}",
        error_type=type(error).__name__,
        traceback="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        **context
    )
    capture_exception(error, context)
