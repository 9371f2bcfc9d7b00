"""Standardized Error Handling Utilities

Provides the exception hierarchy and the logging helpers shared by the
conversion core, the engines and the CLI.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from contextlib import contextmanager
from enum import Enum
from typing import Any


class ErrorLevel(Enum):
    """Error severity levels for consistent logging."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class HeicsConvError(Exception):
    """Base exception class for all heicsconv errors."""

    def __init__(
        self, message: str, cause: Exception | None = None, context: dict | None = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.cause:
            return f"{base_msg} (caused by: {self.cause})"
        return base_msg


class ValidationError(HeicsConvError):
    """Raised when input validation fails."""

    pass


class ConfigurationError(HeicsConvError):
    """Raised when configuration is invalid or missing."""

    pass


class EngineError(HeicsConvError):
    """Raised when an engine storage or usage operation fails."""

    pass


class EngineBusyError(EngineError):
    """Raised when a second command is issued while one is still running."""

    pass


class EngineClosedError(EngineError):
    """Raised when a discarded engine instance is used again."""

    pass


class EngineAcquisitionError(HeicsConvError):
    """Raised when no usable engine instance could be produced."""

    pass


class ConversionExhaustedError(HeicsConvError):
    """Raised when every stream hypothesis failed for an input."""

    def __init__(
        self,
        message: str,
        attempts: list | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause=cause, context=context)
        self.attempts = list(attempts or [])


class InvalidStateTransitionError(HeicsConvError):
    """Raised when a session is driven through an illegal state change."""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid session state transition: {current_state} -> {target_state}"
        )


def handle_error(
    error: Exception,
    operation: str,
    error_type: type[HeicsConvError] = EngineError,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
    reraise: bool = True,
) -> HeicsConvError | None:
    """Standardized error handling with consistent logging and error transformation.

    Args:
        error: Original exception that occurred
        operation: Description of operation that failed
        error_type: Type of HeicsConvError to raise
        level: Logging level for the error
        context: Additional context information
        logger: Logger to use (defaults to module logger)
        reraise: Whether to reraise the transformed exception

    Returns:
        The transformed error if reraise=False, otherwise None

    Raises:
        HeicsConvError: Transformed error if reraise=True
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    message = f"Failed to {operation}: {error}"

    error_context = dict(context or {})
    error_context.update(
        {
            "operation": operation,
            "original_error_type": type(error).__name__,
        }
    )

    transformed_error = error_type(message, cause=error, context=error_context)

    log_message = f"🚨 {operation.capitalize()} failed: {error}"
    context_str = ", ".join(f"{k}={v}" for k, v in error_context.items())
    if context_str:
        log_message += f" (context: {context_str})"

    log_func = getattr(logger, level.value)
    log_func(log_message)

    if level in [ErrorLevel.ERROR, ErrorLevel.CRITICAL]:
        logger.debug(f"Traceback for {operation}: {traceback.format_exc()}")

    if reraise:
        raise transformed_error from error
    return transformed_error


@contextmanager
def error_context(
    operation: str,
    error_type: type[HeicsConvError] = EngineError,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
) -> Any:
    """Context manager for standardized error handling.

    Usage:
        with error_context("stage input", EngineError, context={"name": "input.heics"}):
            engine.stage("input.heics", data)

    Errors that are already HeicsConvError instances pass through unchanged.
    """
    try:
        yield
    except HeicsConvError:
        raise
    except Exception as e:
        handle_error(e, operation, error_type, level, context, logger, reraise=True)


def log_info_with_context(
    message: str, context: dict | None = None, logger: logging.Logger | None = None
) -> None:
    """Log an info message with standardized context formatting."""
    if logger is None:
        logger = logging.getLogger(__name__)

    info_msg = f"ℹ️  {message}"
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        info_msg += f" (context: {context_str})"

    logger.info(info_msg)


def safe_operation(
    operation_func: Callable[[], Any],
    operation_name: str,
    default_return: Any = None,
    error_type: type[HeicsConvError] = EngineError,
    level: ErrorLevel = ErrorLevel.WARNING,
    context: dict | None = None,
    logger: logging.Logger | None = None,
) -> Any:
    """Execute *operation_func* and return *default_return* if it fails.

    Used for best-effort work such as removing staged entries, where a
    failure must never change an outcome that has already been decided.
    """
    try:
        with error_context(operation_name, error_type, level, context, logger):
            return operation_func()
    except HeicsConvError as e:
        if logger is None:
            logger = logging.getLogger(__name__)

        logger.warning(f"Safe operation '{operation_name}' failed, using default: {e}")
        return default_return
