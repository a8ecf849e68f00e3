"""
Main Orchestrator for Investment Returns

This module ties together all the components and defines the
end-to-end flows for:
1. Holding return (load holding → build cash flows → XIRR → summary)
2. Ledger return (load raw records → validate → XIRR)
3. Portfolio return (load holdings → per-holding + merged XIRR)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The solver only ever sees validated, strictly typed cash flows
- A rate that did not converge is reported as N/A, never retried
  (the solver is deterministic, a retry would give the same answer)
- Every step is audited
"""

from typing import Optional
from uuid import UUID

from investment_returns.audit import (
    AuditLogger,
    configure_logging,
    create_correlation_id,
)
from investment_returns.calculator import ReturnsCalculator
from investment_returns.config import get_settings
from investment_returns.models.cashflow import (
    HoldingSummary,
    InvestmentHolding,
    InvestmentType,
    PortfolioSummary,
    ReturnResult,
    ValidationResult,
)
from investment_returns.services.storage import (
    AuditStorageInterface,
    CashFlowSourceInterface,
    InMemoryCashFlowSource,
    NotFoundError,
    StorageError,
)
from investment_returns.validation import CashFlowValidator


class ReturnsFlow:
    """
    Orchestrates returns calculations against a cash flow source.

    Storage errors are audited and re-raised; the caller decides
    what to show. Any other failure of the source is audited as a
    system error and re-raised. Unconverged rates are not errors.
    """

    def __init__(
        self,
        source: CashFlowSourceInterface,
        calculator: Optional[ReturnsCalculator] = None,
        validator: Optional[CashFlowValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._calculator = calculator or ReturnsCalculator()
        self._validator = validator or CashFlowValidator()
        self._audit_logger = audit_logger or AuditLogger()

    async def _load_holding(
        self,
        holding_id: UUID,
        correlation_id: UUID,
    ) -> InvestmentHolding:
        try:
            holding = await self._source.get_holding(holding_id)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="get_holding",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "get_holding"},
                correlation_id=correlation_id,
            )
            raise

        if holding is None:
            await self._audit_logger.log_holding_not_found(
                holding_id=holding_id,
                correlation_id=correlation_id,
            )
            raise NotFoundError(f"Holding {holding_id} not found")

        return holding

    async def holding_return(
        self,
        holding_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> HoldingSummary:
        """
        Summarize one holding.

        Raises:
            NotFoundError: If the holding doesn't exist
            StorageError: If the source fails
        """
        correlation_id = correlation_id or create_correlation_id()

        holding = await self._load_holding(holding_id, correlation_id)
        summary = self._calculator.summarize_holding(holding)

        await self._audit_logger.log_rate(
            entity_id=holding.id,
            rate=summary.xirr.rate,
            cashflow_count=summary.xirr.cashflow_count,
            guess=summary.xirr.guess,
            correlation_id=correlation_id,
        )
        await self._audit_logger.log_holding_summarized(
            holding_id=holding.id,
            name=holding.name,
            absolute_return=str(summary.absolute_return),
            correlation_id=correlation_id,
        )

        return summary

    async def ledger_return(
        self,
        holding_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ReturnResult, ValidationResult]:
        """
        XIRR straight from a holding's raw ledger records.

        Records are used in ledger order: the first record is day zero.
        If validation leaves nothing to calculate on, the result is N/A.

        Returns:
            (return_result, validation_result)
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            records = await self._source.get_cashflow_records(holding_id)
        except NotFoundError:
            await self._audit_logger.log_holding_not_found(
                holding_id=holding_id,
                correlation_id=correlation_id,
            )
            raise
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="get_cashflow_records",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "get_cashflow_records"},
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_cashflows_loaded(
            holding_id=holding_id,
            record_count=len(records),
            correlation_id=correlation_id,
        )

        cashflows, validation = self._validator.parse_records(records)

        if not validation.can_calculate:
            await self._audit_logger.log_validation_failed(
                holding_id=holding_id,
                issues=[issue.model_dump() for issue in validation.issues],
                correlation_id=correlation_id,
            )
            return self._calculator.calculate([]), validation

        await self._audit_logger.log_validation_passed(
            holding_id=holding_id,
            record_count=validation.record_count,
            warnings=validation.warnings,
            correlation_id=correlation_id,
        )

        result = self._calculator.calculate(cashflows)
        await self._audit_logger.log_rate(
            entity_id=holding_id,
            rate=result.rate,
            cashflow_count=result.cashflow_count,
            guess=result.guess,
            correlation_id=correlation_id,
            entity_type="ledger",
        )

        return result, validation

    async def portfolio_return(
        self,
        investment_type: Optional[InvestmentType] = None,
        correlation_id: Optional[UUID] = None,
    ) -> PortfolioSummary:
        """
        Summarize every holding (optionally of one type) and the whole.

        Raises:
            StorageError: If the source fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            holdings = await self._source.list_holdings(investment_type=investment_type)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="list_holdings",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "list_holdings"},
                correlation_id=correlation_id,
            )
            raise

        summary = self._calculator.summarize_portfolio(holdings)

        for holding_summary in summary.holdings:
            await self._audit_logger.log_rate(
                entity_id=holding_summary.holding_id,
                rate=holding_summary.xirr.rate,
                cashflow_count=holding_summary.xirr.cashflow_count,
                guess=holding_summary.xirr.guess,
                correlation_id=correlation_id,
            )
        await self._audit_logger.log_rate(
            entity_id=None,
            rate=summary.xirr.rate,
            cashflow_count=summary.xirr.cashflow_count,
            guess=summary.xirr.guess,
            correlation_id=correlation_id,
            entity_type="portfolio",
        )
        await self._audit_logger.log_portfolio_summarized(
            holding_count=len(holdings),
            total_value=str(summary.total_value),
            correlation_id=correlation_id,
        )

        return summary


def create_app_components(
    source: Optional[CashFlowSourceInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> ReturnsFlow:
    """
    Factory function to create the returns flow with its collaborators.

    Args:
        source: Ledger source. An empty in-memory source if None.
        audit_storage: Audit store. Local-only logging if None.

    Returns:
        A ready ReturnsFlow
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    calculator = ReturnsCalculator(
        solver_settings=settings.solver,
        app_settings=settings.app,
    )
    validator = CashFlowValidator(settings=settings.app)

    return ReturnsFlow(
        source=source or InMemoryCashFlowSource(),
        calculator=calculator,
        validator=validator,
        audit_logger=AuditLogger(audit_storage),
    )
