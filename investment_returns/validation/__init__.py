"""Cash flow validation package."""

from investment_returns.validation.validator import (
    CashFlowValidator,
    RecordParseError,
    parse_amount,
    parse_date,
)

__all__ = ["CashFlowValidator", "RecordParseError", "parse_amount", "parse_date"]
