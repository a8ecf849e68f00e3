"""
Tests for the returns calculator.
"""

import pytest
from datetime import date
from decimal import Decimal

from investment_returns.calculator import NOT_AVAILABLE, ReturnsCalculator, format_rate
from investment_returns.config import AppSettings, SolverSettings
from investment_returns.models.cashflow import (
    CashFlow,
    Contribution,
    InvestmentHolding,
    InvestmentType,
)


@pytest.fixture
def calculator():
    return ReturnsCalculator(solver_settings=SolverSettings(), app_settings=AppSettings())


def make_holding(
    name="Index Fund",
    investment_type=InvestmentType.MF_GROWTH,
    contributions=None,
    current_value="1100.00",
    valuation_date=date(2024, 1, 1),
):
    return InvestmentHolding(
        name=name,
        investment_type=investment_type,
        contributions=contributions or [
            Contribution(date=date(2023, 1, 1), amount=Decimal("1000.00")),
        ],
        current_value=Decimal(current_value),
        valuation_date=valuation_date,
    )


class TestFormatRate:
    """Tests for rate display."""

    def test_percentage(self):
        """Test a rate renders as a percentage."""
        assert format_rate(0.1234) == "12.34%"

    def test_negative(self):
        """Test a loss keeps its sign."""
        assert format_rate(-0.05) == "-5.00%"

    def test_precision(self):
        """Test the number of decimal places is configurable."""
        assert format_rate(0.1234, precision=0) == "12%"
        assert format_rate(0.1234, precision=3) == "12.340%"

    @pytest.mark.parametrize("rate", [None, float("nan"), float("inf"), float("-inf")])
    def test_not_available(self, rate):
        """Test missing or non-finite rates show as N/A, never 0%."""
        assert format_rate(rate) == NOT_AVAILABLE


class TestCalculate:
    """Tests for ReturnsCalculator.calculate."""

    def test_known_rate(self, calculator):
        """Test a 10% year is reported and formatted."""
        result = calculator.calculate([
            CashFlow(date=date(2023, 1, 1), amount=-100.0),
            CashFlow(date=date(2024, 1, 1), amount=110.0),
        ])
        assert result.converged is True
        assert result.rate == pytest.approx(0.10, abs=1e-6)
        assert result.display == "10.00%"
        assert result.cashflow_count == 2
        assert result.anchor_date == date(2023, 1, 1)
        assert result.guess == 0.1

    def test_empty_is_not_available(self, calculator):
        """Test an empty list gives N/A instead of raising."""
        result = calculator.calculate([])
        assert result.rate is None
        assert result.converged is False
        assert result.display == NOT_AVAILABLE
        assert result.cashflow_count == 0
        assert result.anchor_date is None

    def test_unconverged_is_not_available(self, calculator):
        """Test a lone flow gives N/A, not zero."""
        result = calculator.calculate([CashFlow(date=date(2023, 1, 1), amount=-100.0)])
        assert result.rate is None
        assert result.converged is False
        assert result.display == NOT_AVAILABLE
        assert result.cashflow_count == 1

    def test_anchor_is_first_element(self, calculator):
        """Test the calculator does not reorder cash flows."""
        result = calculator.calculate([
            CashFlow(date=date(2024, 1, 1), amount=110.0),
            CashFlow(date=date(2023, 1, 1), amount=-100.0),
        ])
        assert result.anchor_date == date(2024, 1, 1)

    def test_explicit_guess_is_recorded(self, calculator):
        """Test a caller-supplied guess is used and reported."""
        result = calculator.calculate(
            [
                CashFlow(date=date(2023, 1, 1), amount=-100.0),
                CashFlow(date=date(2024, 1, 1), amount=110.0),
            ],
            guess=0.05,
        )
        assert result.guess == 0.05
        assert result.rate == pytest.approx(0.10, abs=1e-6)

    def test_iteration_cap_from_settings(self):
        """Test the solver settings are passed through."""
        calculator = ReturnsCalculator(
            solver_settings=SolverSettings(max_iterations=1, default_guess=0.5),
            app_settings=AppSettings(),
        )
        result = calculator.calculate([
            CashFlow(date=date(2023, 1, 1), amount=-100.0),
            CashFlow(date=date(2024, 1, 1), amount=110.0),
        ])
        assert result.converged is False
        assert result.guess == 0.5

    def test_display_precision_from_settings(self):
        """Test the app settings control formatting."""
        calculator = ReturnsCalculator(
            solver_settings=SolverSettings(),
            app_settings=AppSettings(rate_display_precision=1),
        )
        result = calculator.calculate([
            CashFlow(date=date(2023, 1, 1), amount=-100.0),
            CashFlow(date=date(2024, 1, 1), amount=110.0),
        ])
        assert result.display == "10.0%"


class TestHoldingCashflows:
    """Tests for turning a holding into cash flows."""

    def test_signs_and_terminal_value(self, calculator):
        """Test contributions are negative and the value is a final inflow."""
        holding = make_holding(
            contributions=[
                Contribution(date=date(2023, 1, 1), amount=Decimal("1000.00")),
                Contribution(
                    date=date(2023, 6, 1),
                    amount=Decimal("300.00"),
                    is_withdrawal=True,
                ),
            ],
            current_value="800.00",
        )
        flows = calculator.holding_cashflows(holding)
        assert [cf.amount for cf in flows] == [-1000.0, 300.0, 800.0]
        assert flows[-1].date == date(2024, 1, 1)

    def test_flows_are_sorted_by_date(self, calculator):
        """Test out-of-order contributions are sorted so the earliest is day zero."""
        holding = make_holding(
            contributions=[
                Contribution(date=date(2023, 6, 1), amount=Decimal("500.00")),
                Contribution(date=date(2023, 1, 1), amount=Decimal("1000.00")),
            ],
        )
        flows = calculator.holding_cashflows(holding)
        assert [cf.date for cf in flows] == [
            date(2023, 1, 1),
            date(2023, 6, 1),
            date(2024, 1, 1),
        ]

    def test_zero_value_keeps_terminal_flow(self, calculator):
        """Test a worthless holding still records its valuation date."""
        flows = calculator.holding_cashflows(make_holding(current_value="0"))
        assert flows[-1] == CashFlow(date=date(2024, 1, 1), amount=0.0)


class TestSummaries:
    """Tests for holding and portfolio summaries."""

    def test_summarize_holding(self, calculator):
        """Test absolute return, percentage and XIRR of one holding."""
        summary = calculator.summarize_holding(make_holding())
        assert summary.total_invested == Decimal("1000.00")
        assert summary.absolute_return == Decimal("100.00")
        assert summary.return_percentage == pytest.approx(10.0)
        assert summary.xirr.rate == pytest.approx(0.10, abs=1e-6)

    def test_summarize_holding_with_withdrawal(self, calculator):
        """Test withdrawals count towards the gain."""
        holding = make_holding(
            contributions=[
                Contribution(date=date(2023, 1, 1), amount=Decimal("1000.00")),
                Contribution(
                    date=date(2023, 7, 1),
                    amount=Decimal("200.00"),
                    is_withdrawal=True,
                ),
            ],
            current_value="900.00",
        )
        summary = calculator.summarize_holding(holding)
        assert summary.total_withdrawn == Decimal("200.00")
        assert summary.absolute_return == Decimal("100.00")
        assert summary.xirr.converged is True

    def test_summarize_portfolio(self, calculator):
        """Test totals, allocation and merged XIRR."""
        fund = make_holding()
        ppf = make_holding(
            name="PPF Account",
            investment_type=InvestmentType.PPF,
            current_value="1100.00",
        )
        summary = calculator.summarize_portfolio([fund, ppf])

        assert summary.total_invested == Decimal("2000.00")
        assert summary.total_value == Decimal("2200.00")
        assert summary.total_returns == Decimal("200.00")
        assert summary.return_percentage == pytest.approx(10.0)
        assert summary.asset_allocation == {
            "MF-Growth": Decimal("1100.00"),
            "PPF": Decimal("1100.00"),
        }
        assert len(summary.holdings) == 2
        assert summary.xirr.rate == pytest.approx(0.10, abs=1e-6)
        assert summary.xirr.cashflow_count == 4

    def test_summarize_portfolio_merges_in_date_order(self, calculator):
        """Test the portfolio anchor is the earliest flow of any holding."""
        late = make_holding(
            contributions=[Contribution(date=date(2023, 6, 1), amount=Decimal("500.00"))],
            current_value="520.00",
        )
        early = make_holding(name="Early")
        summary = calculator.summarize_portfolio([late, early])
        assert summary.xirr.anchor_date == date(2023, 1, 1)

    def test_empty_portfolio(self, calculator):
        """Test an empty portfolio has zero totals and N/A XIRR."""
        summary = calculator.summarize_portfolio([])
        assert summary.total_invested == Decimal("0")
        assert summary.return_percentage == 0.0
        assert summary.asset_allocation == {}
        assert summary.xirr.display == NOT_AVAILABLE
