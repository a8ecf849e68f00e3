"""
Audit Models for Investment Returns

Every calculation the system performs is logged for audit purposes.
This provides:
1. Traceability of which cash flows produced which rate
2. Debugging information when a rate comes out as N/A
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step of a returns calculation has its own event type.
    """
    # Loading
    CASHFLOWS_LOADED = "cashflows_loaded"
    HOLDING_NOT_FOUND = "holding_not_found"

    # Validation
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_FAILED = "validation_failed"

    # Calculation
    RATE_CALCULATED = "rate_calculated"
    RATE_NOT_CONVERGED = "rate_not_converged"
    HOLDING_SUMMARIZED = "holding_summarized"
    PORTFOLIO_SUMMARIZED = "portfolio_summarized"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'holding', 'portfolio', 'ledger')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one portfolio refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.rate_calculated(holding_id, 0.12, 14, correlation_id)
        event = AuditEventBuilder.holding_not_found(holding_id, correlation_id)
    """

    @staticmethod
    def cashflows_loaded(
        holding_id: UUID,
        record_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CASHFLOWS_LOADED,
            entity_type="holding",
            entity_id=holding_id,
            correlation_id=correlation_id,
            description=f"Loaded {record_count} cash flow records",
            details={
                "record_count": record_count,
            },
        )

    @staticmethod
    def holding_not_found(
        holding_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOLDING_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="holding",
            entity_id=holding_id,
            correlation_id=correlation_id,
            description="Holding not found in storage",
        )

    @staticmethod
    def validation_passed(
        holding_id: Optional[UUID],
        record_count: int,
        warnings: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_PASSED,
            entity_type="ledger",
            entity_id=holding_id,
            correlation_id=correlation_id,
            description=f"Validated {record_count} records with {len(warnings)} warnings",
            details={
                "record_count": record_count,
                "warnings": warnings,
            },
        )

    @staticmethod
    def validation_failed(
        holding_id: Optional[UUID],
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            entity_id=holding_id,
            correlation_id=correlation_id,
            description=f"Cash flow validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def rate_calculated(
        entity_id: Optional[UUID],
        rate: float,
        cashflow_count: int,
        correlation_id: UUID,
        entity_type: str = "holding",
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_CALCULATED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"XIRR calculated: {rate:.4%} over {cashflow_count} cash flows",
            details={
                "rate": rate,
                "cashflow_count": cashflow_count,
            },
        )

    @staticmethod
    def rate_not_converged(
        entity_id: Optional[UUID],
        cashflow_count: int,
        guess: float,
        correlation_id: UUID,
        entity_type: str = "holding",
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_NOT_CONVERGED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description="XIRR did not converge; rate shown as N/A",
            details={
                "cashflow_count": cashflow_count,
                "guess": guess,
            },
        )

    @staticmethod
    def holding_summarized(
        holding_id: UUID,
        name: str,
        absolute_return: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOLDING_SUMMARIZED,
            entity_type="holding",
            entity_id=holding_id,
            correlation_id=correlation_id,
            description=f"Holding summarized: {name}",
            details={
                "name": name,
                "absolute_return": absolute_return,
            },
        )

    @staticmethod
    def portfolio_summarized(
        holding_count: int,
        total_value: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_SUMMARIZED,
            entity_type="portfolio",
            correlation_id=correlation_id,
            description=f"Portfolio summarized across {holding_count} holdings",
            details={
                "holding_count": holding_count,
                "total_value": total_value,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
