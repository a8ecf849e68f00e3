"""
Core Data Models for Investment Returns

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Support the audit trail

DESIGN DECISION: CashFlow is strict and immutable. A date is a calendar date,
an amount is a finite float. Converting user-facing strings happens in the
validation package, never here.
"""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class InvestmentType(str, Enum):
    """
    Investment types tracked by the ledger.

    DESIGN DECISION: Explicit types rather than free text so that
    asset allocation can be grouped reliably.
    """
    MF_GROWTH = "MF-Growth"
    MF_DIVIDEND = "MF-Dividend"
    SIP = "SIP"
    PPF = "PPF"
    EPF = "EPF"
    NPS_T1 = "NPS-T1"
    NPS_T2 = "NPS-T2"
    GOLD_COIN = "Gold-Coin"
    GOLD_ETF = "Gold-ETF"
    SGB = "SGB"
    FD = "FD"
    RD = "RD"
    STOCKS = "Stocks"
    BONDS = "Bonds"
    REAL_ESTATE = "Real Estate"
    OTHERS = "Others"


# =============================================================================
# CASH FLOW
# =============================================================================

class CashFlow(BaseModel):
    """
    A single dated cash flow, seen from the investor's side.

    Positive amount = money coming back to the investor (redemption,
    withdrawal, maturity). Negative amount = money paid in (contribution,
    purchase). Zero is allowed and changes nothing.

    CRITICAL: The first CashFlow of a sequence is the anchor date for
    discounting, whatever its calendar position.
    """
    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(
        ...,
        strict=True,
        description="Calendar date of the flow (day granularity)"
    )
    amount: float = Field(
        ...,
        strict=True,
        allow_inf_nan=False,
        description="Signed amount: > 0 inflow to investor, < 0 outflow"
    )

    @field_validator('date', mode='before')
    @classmethod
    def truncate_datetime(cls, v: Any) -> Any:
        """Only the day matters; drop any time of day."""
        if isinstance(v, datetime):
            return v.date()
        return v


# =============================================================================
# HOLDINGS
# =============================================================================

class Contribution(BaseModel):
    """
    Money moved into (or out of) a holding on a given day.

    A withdrawal is recorded with is_withdrawal=True and a positive amount.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: dt.date = Field(
        ...,
        description="Date of the payment"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount paid in or withdrawn"
    )
    is_withdrawal: bool = Field(
        default=False,
        description="True when money came back to the investor"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=200
    )


class InvestmentHolding(BaseModel):
    """
    One tracked investment: what was paid in, and what it is worth now.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique holding ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Fund, scheme or instrument name"
    )
    investment_type: InvestmentType
    contributions: list[Contribution] = Field(
        ...,
        min_length=1,
        description="Every payment into or out of the holding"
    )
    current_value: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Market or maturity value on valuation_date"
    )
    valuation_date: date = Field(
        ...,
        description="Date current_value applies to"
    )
    family_member: Optional[str] = Field(
        default=None,
        max_length=100
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000
    )

    @model_validator(mode='after')
    def validate_dates(self) -> 'InvestmentHolding':
        """Valuation cannot predate the first payment."""
        first = min(c.date for c in self.contributions)
        if self.valuation_date < first:
            raise ValueError("Valuation date cannot be before the first contribution")
        return self

    @property
    def total_invested(self) -> Decimal:
        return sum(
            (c.amount for c in self.contributions if not c.is_withdrawal),
            Decimal("0"),
        )

    @property
    def total_withdrawn(self) -> Decimal:
        return sum(
            (c.amount for c in self.contributions if c.is_withdrawal),
            Decimal("0"),
        )


# =============================================================================
# RAW INPUT & VALIDATION MODELS
# =============================================================================

class RawCashFlowRecord(BaseModel):
    """
    A ledger record exactly as it came from a form or storage.

    Dates may be strings, amounts may be strings or numbers.
    Nothing is trusted until the validator has converted it.
    """

    date: Any = None
    amount: Any = None
    source_id: Optional[str] = Field(
        default=None,
        description="Identifier of the ledger entry, for error messages"
    )


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'one_sided')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    record_index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Position of the offending record, if any"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (dates and amounts parse)
    Stage 2: Semantic validation (signs, ordering, future dates)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    record_count: int = Field(
        ...,
        ge=0,
        description="Number of records inspected"
    )

    # Stage results
    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    # Overall result
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    can_calculate: bool = Field(
        ...,
        description="Is there anything the solver can be run on?"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# RESULT MODELS
# =============================================================================

class ReturnResult(BaseModel):
    """
    Outcome of one XIRR calculation.

    CRITICAL: A rate that did not converge is None and displays as "N/A".
    It is never reported as zero.
    """

    rate: Optional[float] = Field(
        default=None,
        description="Annualized rate as a decimal fraction (0.12 = 12%)"
    )
    converged: bool
    display: str = Field(
        ...,
        description="Rate formatted for display, or 'N/A'"
    )
    cashflow_count: int = Field(
        ...,
        ge=0
    )
    anchor_date: Optional[date] = Field(
        default=None,
        description="Date of the first cash flow (day 0 for discounting)"
    )
    guess: float = Field(
        ...,
        description="Starting rate used by the solver"
    )
    calculated_at: datetime = Field(
        default_factory=datetime.utcnow
    )


class HoldingSummary(BaseModel):
    """Returns for a single holding."""

    holding_id: UUID
    name: str
    investment_type: InvestmentType
    total_invested: Decimal
    total_withdrawn: Decimal
    current_value: Decimal
    absolute_return: Decimal = Field(
        ...,
        description="current_value + withdrawals - invested"
    )
    return_percentage: float = Field(
        ...,
        description="absolute_return as a percentage of invested"
    )
    xirr: ReturnResult


class PortfolioSummary(BaseModel):
    """
    Returns across all holdings.

    return_percentage is 0 when nothing has been invested.
    """

    total_invested: Decimal
    total_value: Decimal
    total_returns: Decimal
    return_percentage: float
    asset_allocation: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Current value per investment type"
    )
    holdings: list[HoldingSummary] = Field(default_factory=list)
    xirr: ReturnResult
