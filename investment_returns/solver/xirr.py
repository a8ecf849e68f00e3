"""
XIRR Solver

Annualized internal rate of return for cash flows on irregular dates.
Finds the rate r for which

    sum(amount_i / (1 + r) ** ((date_i - date_0).days / 365)) == 0

using Newton-Raphson iteration with the derivative in closed form
(no finite differences).

DESIGN DECISION: date_0 is the date of the FIRST cash flow in the given
sequence, not the earliest date. The solver never sorts its input.
Callers that want chronological anchoring sort before calling.

FAILURE MODE: if the iteration has not converged after max_iterations
steps the solver returns NaN. It does not raise. Arithmetic follows
IEEE-754 (numpy float64): a negative base under a fractional power, a zero
derivative or an overflow give NaN/inf, which propagate until the
iteration cap returns NaN.

The one exception is an empty sequence, which raises EmptyCashFlowsError.

Sums use np.sum (pairwise summation), so for long schedules the last bits
of a rate can differ from a strict left-to-right accumulation.

The solver is pure: no logging, no I/O, no shared state.
"""

import math
from typing import Final, Iterable

import numpy as np

from investment_returns.models.cashflow import CashFlow

# =============================================================================
# CONSTANTS
# =============================================================================

# Stop when two successive rates differ by less than this
XIRR_TOLERANCE: Final[float] = 1e-6

# Newton-Raphson steps before returning NaN
XIRR_MAX_ITERATIONS: Final[int] = 100

# Starting rate (10% a year)
XIRR_DEFAULT_GUESS: Final[float] = 0.1

# Actual/365 day count
DAYS_PER_YEAR: Final[float] = 365.0


class EmptyCashFlowsError(ValueError):
    """Raised when the solver is given no cash flows at all."""

    def __init__(self, message: str = "XIRR requires at least one cash flow"):
        super().__init__(message)


# =============================================================================
# INTERNALS
# =============================================================================


def _offsets_and_amounts(cashflows: Iterable[CashFlow]) -> tuple[np.ndarray, np.ndarray]:
    """Day offsets from the first flow, and the amounts, as float64 arrays."""
    flows = list(cashflows)
    if not flows:
        raise EmptyCashFlowsError()

    anchor = flows[0].date
    offsets = np.array([(cf.date - anchor).days for cf in flows], dtype=np.float64)
    amounts = np.array([cf.amount for cf in flows], dtype=np.float64)
    return offsets, amounts


def _npv(rate: np.float64, offsets: np.ndarray, amounts: np.ndarray) -> np.float64:
    years = offsets / DAYS_PER_YEAR
    return np.sum(amounts / np.power(1.0 + rate, years))


def _npv_derivative(rate: np.float64, offsets: np.ndarray, amounts: np.ndarray) -> np.float64:
    years = offsets / DAYS_PER_YEAR
    return -np.sum(
        amounts * offsets / (DAYS_PER_YEAR * np.power(1.0 + rate, years + 1.0))
    )


# =============================================================================
# PUBLIC API
# =============================================================================


def xnpv(rate: float, cashflows: Iterable[CashFlow]) -> float:
    """
    Net present value of the cash flows at an annual rate.

    Discounting is anchored at the first cash flow's date (Actual/365).

    Args:
        rate: Annual discount rate as a decimal fraction
        cashflows: Cash flows; the first one is day 0

    Returns:
        NPV as a float (may be NaN/inf for rates at or below -100%)

    Raises:
        EmptyCashFlowsError: if cashflows is empty
    """
    offsets, amounts = _offsets_and_amounts(cashflows)
    with np.errstate(all="ignore"):
        return float(_npv(np.float64(rate), offsets, amounts))


def xnpv_derivative(rate: float, cashflows: Iterable[CashFlow]) -> float:
    """
    First derivative of xnpv with respect to the rate.

    d/dr sum(a_i * (1+r)^(-t_i)) = sum(-a_i * t_i * (1+r)^(-t_i - 1)),
    with t_i the year fraction from the first flow.
    """
    offsets, amounts = _offsets_and_amounts(cashflows)
    with np.errstate(all="ignore"):
        return float(_npv_derivative(np.float64(rate), offsets, amounts))


def xirr(
    cashflows: Iterable[CashFlow],
    guess: float = XIRR_DEFAULT_GUESS,
    *,
    tolerance: float = XIRR_TOLERANCE,
    max_iterations: int = XIRR_MAX_ITERATIONS,
) -> float:
    """
    Annualized internal rate of return of dated cash flows.

    Args:
        cashflows: Ordered cash flows. Amounts > 0 are inflows to the
                   investor, < 0 are outflows. The first flow's date is
                   day 0 for discounting.
        guess: Starting rate (default 0.1 = 10%)
        tolerance: Convergence threshold on successive rates
        max_iterations: Iteration cap

    Returns:
        The rate as a decimal fraction (0.12 = 12% a year), or NaN if the
        iteration did not converge. Check with is_converged() before use.

    Raises:
        EmptyCashFlowsError: if cashflows is empty

    Examples:
        >>> from datetime import date
        >>> flows = [
        ...     CashFlow(date=date(2023, 1, 1), amount=-100.0),
        ...     CashFlow(date=date(2024, 1, 1), amount=110.0),
        ... ]
        >>> round(xirr(flows), 6)
        0.1
    """
    offsets, amounts = _offsets_and_amounts(cashflows)
    rate = np.float64(guess)

    with np.errstate(all="ignore"):
        for _ in range(max_iterations):
            new_rate = rate - _npv(rate, offsets, amounts) / _npv_derivative(rate, offsets, amounts)
            if abs(new_rate - rate) < tolerance:
                return float(new_rate)
            rate = new_rate

    return math.nan


def is_converged(rate: float) -> bool:
    """True if rate is a usable result, False for the NaN sentinel (or inf)."""
    return math.isfinite(rate)
