"""
In-Memory Storage Implementation

Holds holdings, ledger records and audit events in plain dicts and lists.
Used for tests, demos and as the default when no real backend is wired.

Follows the abstract interfaces, so a persistent backend can replace it
without touching calculation code.
"""

from typing import Optional
from uuid import UUID

from investment_returns.models.audit import AuditEvent
from investment_returns.models.cashflow import (
    InvestmentHolding,
    InvestmentType,
    RawCashFlowRecord,
)
from investment_returns.services.storage.interface import (
    AuditStorageInterface,
    CashFlowSourceInterface,
    DuplicateError,
    NotFoundError,
)


class InMemoryCashFlowSource(CashFlowSourceInterface):
    """
    Cash flow source backed by dictionaries.

    Holdings keep insertion order. Raw ledger records can be attached to a
    holding separately, to exercise the string-to-CashFlow conversion path.
    """

    def __init__(self, holdings: Optional[list[InvestmentHolding]] = None):
        self._holdings: dict[UUID, InvestmentHolding] = {}
        self._records: dict[UUID, list[RawCashFlowRecord]] = {}
        for holding in holdings or []:
            self.add_holding(holding)

    def add_holding(self, holding: InvestmentHolding) -> None:
        """Register a holding. Raises DuplicateError if the ID is taken."""
        if holding.id in self._holdings:
            raise DuplicateError(f"Holding {holding.id} already exists")
        self._holdings[holding.id] = holding

    def set_cashflow_records(
        self,
        holding_id: UUID,
        records: list[RawCashFlowRecord],
    ) -> None:
        """Attach raw ledger records to an existing holding."""
        if holding_id not in self._holdings:
            raise NotFoundError(f"Holding {holding_id} not found")
        self._records[holding_id] = list(records)

    async def get_holding(self, holding_id: UUID) -> Optional[InvestmentHolding]:
        return self._holdings.get(holding_id)

    async def list_holdings(
        self,
        investment_type: Optional[InvestmentType] = None,
    ) -> list[InvestmentHolding]:
        holdings = list(self._holdings.values())
        if investment_type is not None:
            holdings = [h for h in holdings if h.investment_type == investment_type]
        return holdings

    async def get_cashflow_records(
        self,
        holding_id: UUID,
    ) -> list[RawCashFlowRecord]:
        holding = self._holdings.get(holding_id)
        if holding is None:
            raise NotFoundError(f"Holding {holding_id} not found")

        if holding_id in self._records:
            return list(self._records[holding_id])

        # No raw ledger attached: derive records from the holding itself
        records = [
            RawCashFlowRecord(
                date=c.date,
                amount=c.amount if c.is_withdrawal else -c.amount,
                source_id=c.note,
            )
            for c in holding.contributions
        ]
        records.append(
            RawCashFlowRecord(
                date=holding.valuation_date,
                amount=holding.current_value,
                source_id="current_value",
            )
        )
        return records


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
