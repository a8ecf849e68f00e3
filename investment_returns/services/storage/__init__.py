"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for the
ledger data the returns engine reads and the audit events it writes.
"""

from investment_returns.services.storage.interface import (
    AuditStorageInterface,
    CashFlowSourceInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
)
from investment_returns.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCashFlowSource,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "CashFlowSourceInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryCashFlowSource",
]
