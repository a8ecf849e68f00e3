"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Plug in whatever database the tracker uses
2. Use in-memory storage for testing
3. Keep return calculations decoupled from storage implementation

The returns engine only ever READS ledger data. It consumes holdings and
raw {date, amount} records; it never writes them back.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from investment_returns.models.audit import AuditEvent
from investment_returns.models.cashflow import (
    InvestmentHolding,
    InvestmentType,
    RawCashFlowRecord,
)


class CashFlowSourceInterface(ABC):
    """
    Abstract interface for reading investment ledger data.

    Any storage implementation (IndexedDB export, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def get_holding(self, holding_id: UUID) -> Optional[InvestmentHolding]:
        """
        Retrieve a holding by its ID.

        Args:
            holding_id: The holding's unique identifier

        Returns:
            The holding if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_holdings(
        self,
        investment_type: Optional[InvestmentType] = None,
    ) -> list[InvestmentHolding]:
        """
        List holdings, optionally filtered by type.

        Args:
            investment_type: Only return holdings of this type

        Returns:
            List of matching holdings
        """
        pass

    @abstractmethod
    async def get_cashflow_records(
        self,
        holding_id: UUID,
    ) -> list[RawCashFlowRecord]:
        """
        Get the raw ledger records for a holding, in ledger order.

        Args:
            holding_id: The holding's unique identifier

        Returns:
            Records exactly as stored (untyped dates and amounts)

        Raises:
            NotFoundError: If the holding doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one portfolio refresh).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
