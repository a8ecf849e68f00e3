"""
Returns Calculator

DESIGN DECISION: The calculator is the only place that turns holdings into
cash flows and solver output into something a user sees.

- Contributions become outflows (negative), withdrawals inflows (positive)
- The current value is a final inflow on the valuation date
- Flows built here are sorted by date, so day zero is the first payment
- A rate that did not converge is reported as None / "N/A", never as 0

The solver stays a pure function; tolerance, iteration cap and starting
guess come from SolverSettings and are passed in explicitly.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from investment_returns.config import AppSettings, SolverSettings, get_settings
from investment_returns.models.cashflow import (
    CashFlow,
    HoldingSummary,
    InvestmentHolding,
    PortfolioSummary,
    ReturnResult,
)
from investment_returns.solver import is_converged, xirr

NOT_AVAILABLE = "N/A"


def format_rate(rate: Optional[float], precision: int = 2) -> str:
    """
    Format an annualized rate as a percentage.

    >>> format_rate(0.1234)
    '12.34%'
    >>> format_rate(float("nan"))
    'N/A'
    """
    if rate is None or not is_converged(rate):
        return NOT_AVAILABLE
    return f"{rate * 100:.{precision}f}%"


def _percentage(gain: Decimal, base: Decimal) -> float:
    if base <= 0:
        return 0.0
    return float(gain / base * 100)


class ReturnsCalculator:
    """
    Computes XIRR and absolute returns for holdings and portfolios.

    Stateless apart from its settings; safe to share between callers.
    """

    def __init__(
        self,
        solver_settings: Optional[SolverSettings] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        if solver_settings is None or app_settings is None:
            settings = get_settings()
            solver_settings = solver_settings or settings.solver
            app_settings = app_settings or settings.app
        self._solver = solver_settings
        self._app = app_settings

    def calculate(
        self,
        cashflows: list[CashFlow],
        guess: Optional[float] = None,
    ) -> ReturnResult:
        """
        Run the solver on cash flows exactly as given.

        The first cash flow is day zero. An empty list gives an
        unconverged result instead of an exception.
        """
        start = self._solver.default_guess if guess is None else guess

        if not cashflows:
            return ReturnResult(
                rate=None,
                converged=False,
                display=NOT_AVAILABLE,
                cashflow_count=0,
                guess=start,
            )

        rate = xirr(
            cashflows,
            start,
            tolerance=self._solver.tolerance,
            max_iterations=self._solver.max_iterations,
        )
        converged = is_converged(rate)

        return ReturnResult(
            rate=rate if converged else None,
            converged=converged,
            display=format_rate(rate, self._app.rate_display_precision),
            cashflow_count=len(cashflows),
            anchor_date=cashflows[0].date,
            guess=start,
        )

    def holding_cashflows(self, holding: InvestmentHolding) -> list[CashFlow]:
        """
        Build the investor-side cash flows of a holding, oldest first.

        A zero current value still produces a (zero) terminal flow so the
        valuation date is kept on record.
        """
        flows = [
            CashFlow(
                date=c.date,
                amount=float(c.amount) if c.is_withdrawal else -float(c.amount),
            )
            for c in holding.contributions
        ]
        flows.append(
            CashFlow(date=holding.valuation_date, amount=float(holding.current_value))
        )
        # sorted() is stable: same-day flows keep ledger order
        return sorted(flows, key=lambda cf: cf.date)

    def summarize_holding(
        self,
        holding: InvestmentHolding,
        guess: Optional[float] = None,
    ) -> HoldingSummary:
        """Absolute return and XIRR of a single holding."""
        invested = holding.total_invested
        withdrawn = holding.total_withdrawn
        gain = holding.current_value + withdrawn - invested

        return HoldingSummary(
            holding_id=holding.id,
            name=holding.name,
            investment_type=holding.investment_type,
            total_invested=invested,
            total_withdrawn=withdrawn,
            current_value=holding.current_value,
            absolute_return=gain,
            return_percentage=_percentage(gain, invested),
            xirr=self.calculate(self.holding_cashflows(holding), guess),
        )

    def summarize_portfolio(
        self,
        holdings: list[InvestmentHolding],
        guess: Optional[float] = None,
    ) -> PortfolioSummary:
        """
        Totals, allocation by type and XIRR across holdings.

        The portfolio XIRR is computed over all holdings' cash flows merged
        in date order.
        """
        summaries = [self.summarize_holding(h, guess) for h in holdings]

        total_invested = sum((s.total_invested for s in summaries), Decimal("0"))
        total_withdrawn = sum((s.total_withdrawn for s in summaries), Decimal("0"))
        total_value = sum((s.current_value for s in summaries), Decimal("0"))
        total_returns = total_value + total_withdrawn - total_invested

        allocation: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for s in summaries:
            allocation[s.investment_type.value] += s.current_value

        merged = sorted(
            (cf for h in holdings for cf in self.holding_cashflows(h)),
            key=lambda cf: cf.date,
        )

        return PortfolioSummary(
            total_invested=total_invested,
            total_value=total_value,
            total_returns=total_returns,
            return_percentage=_percentage(total_returns, total_invested),
            asset_allocation=dict(allocation),
            holdings=summaries,
            xirr=self.calculate(merged, guess),
        )
