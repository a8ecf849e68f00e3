"""Returns calculation package."""

from investment_returns.calculator.returns import (
    NOT_AVAILABLE,
    ReturnsCalculator,
    format_rate,
)

__all__ = ["NOT_AVAILABLE", "ReturnsCalculator", "format_rate"]
