"""Shared utilities for repopacker."""

from .error_handling import (
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    EntryError,
    InvalidSourceReference,
    PackRepoError,
    RemoteResourceNotFound,
    TransientFetchFailure,
    UnreadableEntry,
)

__all__ = [
    'ErrorContext',
    'ErrorHandler',
    'ErrorSeverity',
    'EntryError',
    'InvalidSourceReference',
    'PackRepoError',
    'RemoteResourceNotFound',
    'TransientFetchFailure',
    'UnreadableEntry',
]
