"""XIRR solver package."""

from investment_returns.solver.xirr import (
    DAYS_PER_YEAR,
    XIRR_DEFAULT_GUESS,
    XIRR_MAX_ITERATIONS,
    XIRR_TOLERANCE,
    EmptyCashFlowsError,
    is_converged,
    xirr,
    xnpv,
    xnpv_derivative,
)

__all__ = [
    "DAYS_PER_YEAR",
    "XIRR_DEFAULT_GUESS",
    "XIRR_MAX_ITERATIONS",
    "XIRR_TOLERANCE",
    "EmptyCashFlowsError",
    "is_converged",
    "xirr",
    "xnpv",
    "xnpv_derivative",
]
