"""
Structured logging for the product manager.

JSON records go to the log file (and to the console outside debug mode);
credential material passed as extras is masked before it reaches a sink.
"""

import logging
import logging.handlers
import json
import traceback
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional
from contextlib import contextmanager
import streamlit as st

from config.app_config import AppConfig, get_config

# LogRecord attributes that are not user-supplied extras
_RESERVED_RECORD_KEYS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime'
})

# Extras that must never reach a log sink
_SENSITIVE_KEYS = frozenset({'password', 'password_hash', 'salt', 'token'})

_LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
_LOG_FILE_BACKUPS = 3


def mask_sensitive(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of fields with credential values replaced by ***"""
    return {key: ("***" if key in _SENSITIVE_KEYS else value) for key, value in fields.items()}


class StructuredFormatter(logging.Formatter):
    """
    Formats each record as one JSON object per line
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info)
            }

        extra_fields = mask_sensitive({
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        })
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, ensure_ascii=False, default=str)


class StreamlitLogHandler(logging.Handler):
    """
    Surfaces log records on the Streamlit page (development only)
    """

    def emit(self, record: logging.LogRecord):
        try:
            if record.levelno >= logging.ERROR:
                st.error(f"🚨 {record.getMessage()}")
            elif record.levelno >= logging.WARNING:
                st.warning(f"⚠️ {record.getMessage()}")
            else:
                st.info(f"ℹ️ {record.getMessage()}")
        except Exception:
            self.handleError(record)


def _console_handler(config: AppConfig) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, config.logging.level))
    if config.debug:
        handler.setFormatter(logging.Formatter(config.logging.format + ' [%(filename)s:%(lineno)d]'))
    else:
        handler.setFormatter(StructuredFormatter())
    return handler


def _file_handler(config: AppConfig) -> logging.Handler:
    log_file = Path(config.logging.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=_LOG_FILE_BACKUPS
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logging(config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Configure the root logger from the logging section of the app config

    Args:
        config: Configuration to apply (process-wide config when omitted)

    Returns:
        logging.Logger: Configured root logger
    """
    config = config or get_config()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.level))
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(config))

    if config.logging.enable_file_logging:
        root_logger.addHandler(_file_handler(config))

    if config.debug and config.environment == "development":
        streamlit_handler = StreamlitLogHandler()
        streamlit_handler.setLevel(logging.ERROR)
        streamlit_handler.setFormatter(logging.Formatter('%(message)s'))
        root_logger.addHandler(streamlit_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; configuration happens once in setup_logging"""
    return logging.getLogger(name)


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str, **extra_fields):
    """
    Log how long a block took at debug level, or the failure at error level

    Args:
        logger: Logger instance
        operation: Description of the operation
        **extra_fields: Additional fields to include in log
    """
    start_time = datetime.now()
    logger.debug(f"Starting {operation}", extra={"operation": operation, **extra_fields})

    try:
        yield
    except Exception as e:
        duration = (datetime.now() - start_time).total_seconds()
        logger.error(f"Failed {operation}: {e}", extra={
            "operation": operation,
            "duration_seconds": duration,
            "status": "error",
            "error_type": type(e).__name__,
            **extra_fields
        }, exc_info=True)
        raise

    duration = (datetime.now() - start_time).total_seconds()
    logger.debug(f"Completed {operation} in {duration:.3f}s", extra={
        "operation": operation,
        "duration_seconds": duration,
        "status": "success",
        **extra_fields
    })


def _log_event(logger: logging.Logger, event_type: str, message: str, **fields):
    logger.info(message, extra=mask_sensitive({
        "event_type": event_type,
        "timestamp": datetime.now().isoformat(),
        **fields
    }))


def log_auth_event(logger: logging.Logger, event_type: str, email: Optional[str] = None, **details):
    """
    Log authentication events (signup, login, logout, password change)

    Args:
        logger: Logger instance
        event_type: Type of event (e.g., "login", "login_failed")
        email: Account email, if known
        **details: Additional event details
    """
    _log_event(logger, "auth_event", f"Auth event: {event_type}",
               auth_event_type=event_type, email=email, **details)


def log_product_event(logger: logging.Logger, event_type: str, product_id: Optional[str], user_id: str, **details):
    """Log product lifecycle events (created, updated, deleted, cleared)"""
    _log_event(logger, "product_event", f"Product event: {event_type}",
               product_event_type=event_type, product_id=product_id, user_id=user_id, **details)


def log_user_interaction(logger: logging.Logger, interaction_type: str, **details):
    _log_event(logger, "user_interaction", f"User interaction: {interaction_type}",
               interaction_type=interaction_type, **details)


class ErrorTracker:
    """
    Counts errors by type and UI context, logging each occurrence
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.error_counts: Dict[str, int] = {}

    def track_error(self, error: Exception, context: str = "", **extra_info):
        """
        Record an error raised while rendering a part of the page

        Args:
            error: Exception that occurred
            context: Page section where it occurred (e.g. "product_list")
            **extra_info: Additional error information
        """
        error_type = type(error).__name__
        error_key = f"{error_type}:{context}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.error(f"Error in {context}: {error}", extra={
            "event_type": "error",
            "error_type": error_type,
            "error_message": str(error),
            "context": context,
            "error_count": self.error_counts[error_key],
            **extra_info
        }, exc_info=True)

    def get_error_summary(self) -> Dict[str, Any]:
        return {
            "total_errors": sum(self.error_counts.values()),
            "unique_errors": len(self.error_counts),
            "error_breakdown": dict(self.error_counts),
            "timestamp": datetime.now().isoformat()
        }


_logger_setup = False
_error_tracker: Optional[ErrorTracker] = None


def initialize_logging() -> ErrorTracker:
    """
    Configure logging once per process and return the shared error tracker
    """
    global _logger_setup, _error_tracker

    if not _logger_setup:
        setup_logging()
        _logger_setup = True

    if _error_tracker is None:
        _error_tracker = ErrorTracker(logging.getLogger())

    return _error_tracker
