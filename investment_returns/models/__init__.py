"""
Data Models Package

This package contains all Pydantic models used in the Investment Returns system.
All data flowing through the system must conform to these schemas.
"""

from investment_returns.models.cashflow import (
    CashFlow,
    Contribution,
    HoldingSummary,
    InvestmentHolding,
    InvestmentType,
    PortfolioSummary,
    RawCashFlowRecord,
    ReturnResult,
    ValidationIssue,
    ValidationResult,
)
from investment_returns.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Cash flow models
    "CashFlow",
    "Contribution",
    "HoldingSummary",
    "InvestmentHolding",
    "InvestmentType",
    "PortfolioSummary",
    "RawCashFlowRecord",
    "ReturnResult",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
