"""Error types and standardized per-file error handling.

Whole-run failures (bad source reference, missing repository) propagate as
exceptions. Per-file failures (unreadable file, failed fetch) are isolated:
the :class:`ErrorHandler` logs them, counts them and hands back a fallback
so the run continues.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')


class PackRepoError(Exception):
    """Base exception for repopacker errors."""
    pass


class InvalidSourceReference(PackRepoError):
    """The repository reference (e.g. a GitHub URL) cannot be parsed."""
    pass


class RemoteResourceNotFound(PackRepoError):
    """The remote repository, branch or tree does not exist."""
    pass


class EntryError(PackRepoError):
    """Failure confined to a single file; never aborts a run."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}" if reason else path)


class UnreadableEntry(EntryError):
    """A local file could not be read or decoded as text."""
    pass


class TransientFetchFailure(EntryError):
    """A remote file body could not be fetched."""
    pass


class ErrorSeverity(Enum):
    """Error severity levels for consistent error classification."""
    LOW = "low"           # Per-file errors with fallbacks
    MEDIUM = "medium"     # Errors that degrade the result


@dataclass
class ErrorContext:
    """Context information for error reporting and debugging."""
    operation: str
    component: str
    file_path: Optional[str] = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM


class ErrorHandler:
    """Centralized per-file error handling with consistent logging."""

    ENTRY_ERRORS: Tuple[Type[Exception], ...] = (EntryError,)

    def __init__(self, component_name: str = "repopacker"):
        self.component_name = component_name
        self._error_counts: Dict[str, int] = {}

    def handle_with_fallback(
        self,
        operation: Callable[[], T],
        fallback_value: T,
        context: Optional[ErrorContext] = None,
        handled: Tuple[Type[Exception], ...] = ENTRY_ERRORS,
    ) -> T:
        """Execute operation, returning ``fallback_value`` on a handled error.

        Args:
            operation: Function to execute
            fallback_value: Value to return if operation fails
            context: Error context for logging
            handled: Exception types to absorb; anything else propagates

        Returns:
            Result of operation or fallback value on error
        """
        try:
            return operation()
        except handled as e:
            self._increment_error_count(type(e).__name__)
            self._log_error(e, context)
            return fallback_value

    def read_entry(
        self,
        path: str,
        operation: Callable[[str], T],
        fallback_value: T = None,
    ) -> T:
        """Read one file through ``operation``, isolating per-file failures."""
        context = ErrorContext(
            operation="read_entry",
            component=self.component_name,
            file_path=path,
            severity=ErrorSeverity.LOW,
        )
        return self.handle_with_fallback(lambda: operation(path), fallback_value, context)

    @property
    def total_errors(self) -> int:
        return sum(self._error_counts.values())

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of errors encountered.

        Returns:
            Dictionary with error statistics
        """
        return {
            'total_errors': self.total_errors,
            'error_counts': self._error_counts.copy(),
        }

    def _log_error(self, error: Exception, context: Optional[ErrorContext] = None):
        """Log error with context information."""
        if context:
            level = logging.WARNING if context.severity is ErrorSeverity.LOW else logging.ERROR
            logger.log(
                level,
                f"Error in {context.component}.{context.operation}: {error}",
                extra={
                    'component': context.component,
                    'operation': context.operation,
                    'file_path': context.file_path,
                    'severity': context.severity.value,
                },
            )
        else:
            logger.error(f"Error in {self.component_name}: {error}")

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Stack trace: {traceback.format_exc()}")

    def _increment_error_count(self, error_type: str):
        self._error_counts[error_type] = self._error_counts.get(error_type, 0) + 1
