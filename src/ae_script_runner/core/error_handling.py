"""
Centralized error handling utilities for AE Script Runner
"""

import functools
import inspect
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Error severity levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RunnerError(Exception):
    """Base exception for AE Script Runner errors"""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.severity = severity
        self.details = details or {}
        self.timestamp = time.time()


class NoActiveDocumentError(RunnerError):
    """No execute path is configured and no document is open"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "No active editor found. Open a JSX/JS file before running the command.",
            ErrorSeverity.LOW,
        )


class UnsupportedPlatformError(RunnerError):
    """Neither addressing scheme applies to the running platform"""

    def __init__(self, platform_name: str):
        super().__init__(
            "AE Script Runner only supports macOS and Windows at this time.",
            ErrorSeverity.HIGH,
            details={"platform": platform_name},
        )
        self.platform_name = platform_name


class DetectionExhaustedError(RunnerError):
    """No working After Effects installation could be found"""

    pass


class ExternalProcessError(RunnerError):
    """Error when interacting with an external process"""

    pass


class NonZeroExitError(ExternalProcessError):
    """External process reported failure"""

    def __init__(self, returncode: int, stderr: str = ""):
        message = stderr or f"Process exited with code {returncode}"
        super().__init__(message, details={"returncode": returncode})
        self.returncode = returncode
        self.stderr = stderr


class ProcessLaunchError(ExternalProcessError):
    """The executable could not be started"""

    pass


class ExecutionTimeoutError(ExternalProcessError):
    """The external process did not finish within the configured timeout"""

    def __init__(self, command: str, timeout: float):
        super().__init__(
            f"{command} did not finish within {timeout:g} seconds",
            details={"command": command, "timeout": timeout},
        )
        self.timeout = timeout


class ValidationError(RunnerError):
    """User supplied data failed validation"""

    def __init__(self, message: str, field: str, value: Any, details: Optional[dict] = None):
        super().__init__(message, ErrorSeverity.LOW, details)
        self.field = field
        self.value = value


def _is_swallowed(error: Exception, raise_on: Optional[Tuple[Type[Exception], ...]]) -> bool:
    if raise_on and isinstance(error, raise_on):
        return False
    return not (isinstance(error, RunnerError) and error.severity == ErrorSeverity.CRITICAL)


def handle_errors(
    *exceptions: Type[Exception],
    default_return: Any = None,
    log_errors: bool = True,
    raise_on: Optional[Tuple[Type[Exception], ...]] = None,
) -> Callable:
    """
    Turn the listed exceptions into a warning and a fallback return value

    Works on plain and ``async`` functions. Critical ``RunnerError``s and
    anything in ``raise_on`` still propagate.

    Args:
        exceptions: Exception types to catch
        default_return: Value returned when one was caught
        log_errors: Log caught exceptions at WARNING level
        raise_on: Exception types that always propagate
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def recover(error: Exception) -> Any:
            if not _is_swallowed(error, raise_on):
                raise error
            if log_errors:
                logger.warning(
                    f"{func.__name__} failed: {error}",
                    extra={
                        "function": func.__name__,
                        "error_module": func.__module__,
                        "error_type": type(error).__name__,
                    },
                )
            return default_return

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    return recover(e)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                return recover(e)

        return sync_wrapper

    return decorator


class ErrorContext:
    """Logs a failed operation once, with timing, and normalises OS errors

    A ``RunnerError`` raised inside the block propagates unchanged. An
    ``OSError`` becomes ``RunnerError("Failed to <operation>: ...")``.
    """

    def __init__(
        self,
        operation: str,
        service: Optional[str] = None,
        reraise: bool = True,
    ):
        self.operation = operation
        self.service = service
        self.reraise = reraise
        self._started = 0.0

    def __enter__(self):
        self._started = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            return False

        logger.error(
            f"{self.operation} failed: {exc_val}",
            exc_info=not isinstance(exc_val, RunnerError),
            extra={
                "operation": self.operation,
                "service": self.service,
                "elapsed": round(time.monotonic() - self._started, 3),
                "error_type": exc_type.__name__,
            },
        )

        if not self.reraise:
            return True

        if isinstance(exc_val, OSError) and not isinstance(exc_val, RunnerError):
            raise RunnerError(
                f"Failed to {self.operation}: {exc_val}",
                details={"original_error": exc_type.__name__},
            ) from exc_val

        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)
