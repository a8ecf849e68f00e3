"""Services package."""

from investment_returns.services.storage import (
    AuditStorageInterface,
    CashFlowSourceInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryCashFlowSource,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "CashFlowSourceInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryCashFlowSource",
    "NotFoundError",
    "StorageError",
]
