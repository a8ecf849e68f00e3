"""
Audit Logger

DESIGN DECISION: Every returns calculation is logged.
This provides:
1. Traceability from rate back to the cash flows it came from
2. Debugging capability when a rate shows as N/A
3. User-visible history of calculations

The audit logger:
- Is async so it fits the storage layer's interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events

The XIRR solver itself never logs; logging happens around it.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from investment_returns.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditSeverity,
)
from investment_returns.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route the stdlib root logger to stdout at the given level.

    structlog filters by the stdlib level, so nothing below it is emitted.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_cashflows_loaded(
        self,
        holding_id: UUID,
        record_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log ledger records loaded for a holding."""
        event = AuditEventBuilder.cashflows_loaded(
            holding_id=holding_id,
            record_count=record_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_holding_not_found(
        self,
        holding_id: UUID,
        correlation_id: UUID,
    ) -> None:
        """Log a lookup for a holding that doesn't exist."""
        event = AuditEventBuilder.holding_not_found(
            holding_id=holding_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_passed(
        self,
        holding_id: Optional[UUID],
        record_count: int,
        warnings: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log a ledger that passed validation."""
        event = AuditEventBuilder.validation_passed(
            holding_id=holding_id,
            record_count=record_count,
            warnings=warnings,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        holding_id: Optional[UUID],
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        event = AuditEventBuilder.validation_failed(
            holding_id=holding_id,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_rate(
        self,
        entity_id: Optional[UUID],
        rate: Optional[float],
        cashflow_count: int,
        guess: float,
        correlation_id: UUID,
        entity_type: str = "holding",
    ) -> None:
        """Log a solver outcome: calculated rate, or N/A."""
        if rate is None:
            event = AuditEventBuilder.rate_not_converged(
                entity_id=entity_id,
                cashflow_count=cashflow_count,
                guess=guess,
                correlation_id=correlation_id,
                entity_type=entity_type,
            )
        else:
            event = AuditEventBuilder.rate_calculated(
                entity_id=entity_id,
                rate=rate,
                cashflow_count=cashflow_count,
                correlation_id=correlation_id,
                entity_type=entity_type,
            )
        await self.log(event)

    async def log_holding_summarized(
        self,
        holding_id: UUID,
        name: str,
        absolute_return: str,
        correlation_id: UUID,
    ) -> None:
        """Log a completed holding summary."""
        event = AuditEventBuilder.holding_summarized(
            holding_id=holding_id,
            name=name,
            absolute_return=absolute_return,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_portfolio_summarized(
        self,
        holding_count: int,
        total_value: str,
        correlation_id: UUID,
    ) -> None:
        """Log a completed portfolio summary."""
        event = AuditEventBuilder.portfolio_summarized(
            holding_count=holding_count,
            total_value=total_value,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage failure."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a portfolio refresh).
    Pass it through all subsequent operations.
    """
    return uuid4()
