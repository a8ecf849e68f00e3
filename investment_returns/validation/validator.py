"""
Two-Stage Cash Flow Validation

DESIGN DECISION: Ledger records arrive loosely typed (form strings,
numbers, dates). The solver only accepts strict CashFlow objects, so
conversion and checking happen here, in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Every record has a parseable date
- Every record has a finite numeric amount
- There is at least one record

STAGE 2 - SEMANTIC VALIDATION:
- Both inflows and outflows are present
- Records are in chronological order
- Zero amounts
- Dates in the future

IMPORTANT: Validation NEVER silently fixes issues.
Unsorted records stay unsorted (the first record is the XIRR anchor);
it reports them for the user to decide.
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from investment_returns.config import AppSettings, get_settings
from investment_returns.models.cashflow import (
    CashFlow,
    RawCashFlowRecord,
    ValidationIssue,
    ValidationResult,
)

# Accepted date layouts for string input, tried in order
DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")

# Prefixes stripped from amount strings
CURRENCY_PREFIXES = ("Rs.", "Rs", "INR", "₹", "$", "€", "£")


class RecordParseError(ValueError):
    """A single field of a ledger record could not be converted."""
    pass


def parse_date(value: Any) -> date:
    """
    Convert a ledger date to a calendar date.

    Accepts date, datetime (time dropped) and strings in
    YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY or full ISO-8601 form.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise RecordParseError(f"Not a date: {value!r}")

    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise RecordParseError(f"Unrecognized date format: {value!r}")


def parse_amount(value: Any) -> float:
    """
    Convert a ledger amount to a finite float.

    Accepts int, float, Decimal and numeric strings with thousands
    separators or a leading currency symbol ("₹1,250.50").
    """
    if isinstance(value, bool):
        raise RecordParseError(f"Not an amount: {value!r}")

    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace(" ", "")
        negative = text.startswith("-")
        if negative:
            text = text[1:]
        for prefix in CURRENCY_PREFIXES:
            if text.startswith(prefix):
                text = text[len(prefix):]
                break
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise RecordParseError(f"Not a number: {value!r}")
        if negative:
            number = -number
    else:
        raise RecordParseError(f"Not an amount: {value!r}")

    if not number.is_finite():
        raise RecordParseError(f"Amount must be finite: {value!r}")

    result = float(number)
    if not math.isfinite(result):
        raise RecordParseError(f"Amount out of range: {value!r}")
    return result


class CashFlowValidator:
    """
    Converts and validates ledger records through a two-stage pipeline.

    Stage 1: Schema validation (record by record)
    Stage 2: Semantic validation (over the whole sequence)
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize validator.

        Args:
            settings: App settings; loaded from the environment if None.
            today: Reference date for future-date checks. Defaults to
                   date.today() at validation time.
        """
        self._settings = settings or get_settings().app
        self._today = today

    def _validate_schema(
        self,
        records: list[RawCashFlowRecord],
    ) -> tuple[bool, list[CashFlow], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, parsed_cashflows, list_of_issues)
        Records that fail to parse are reported and left out.
        """
        issues = []
        cashflows = []

        if not records:
            issues.append(ValidationIssue(
                field="records",
                issue_type="empty",
                message="No cash flows were provided",
                severity="error",
                suggested_fix="Add at least one contribution and the current value",
            ))
            return False, cashflows, issues

        for index, record in enumerate(records):
            label = record.source_id or f"#{index + 1}"
            parsed_date = None
            parsed_amount = None

            if record.date is None:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="missing",
                    message=f"Record {label} has no date",
                    severity="error",
                    record_index=index,
                ))
            else:
                try:
                    parsed_date = parse_date(record.date)
                except RecordParseError as e:
                    issues.append(ValidationIssue(
                        field="date",
                        issue_type="invalid_format",
                        message=f"Record {label}: {e}",
                        severity="error",
                        record_index=index,
                        suggested_fix="Use the YYYY-MM-DD format",
                    ))

            if record.amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message=f"Record {label} has no amount",
                    severity="error",
                    record_index=index,
                ))
            else:
                try:
                    parsed_amount = parse_amount(record.amount)
                except RecordParseError as e:
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="invalid_format",
                        message=f"Record {label}: {e}",
                        severity="error",
                        record_index=index,
                        suggested_fix="Enter the amount as a plain number",
                    ))

            if parsed_date is not None and parsed_amount is not None:
                cashflows.append(CashFlow(date=parsed_date, amount=parsed_amount))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, cashflows, issues

    def _validate_semantic(
        self,
        cashflows: list[CashFlow],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Checks:
        - Inflows and outflows both present
        - Chronological order
        - Zero amounts
        - Future dates

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        today = self._today or date.today()

        has_inflow = any(cf.amount > 0 for cf in cashflows)
        has_outflow = any(cf.amount < 0 for cf in cashflows)
        if not (has_inflow and has_outflow):
            missing = "inflow" if not has_inflow else "outflow"
            issues.append(ValidationIssue(
                field="amount",
                issue_type="one_sided",
                message=f"No {missing} found; the rate of return may be undefined",
                severity="warning",
                suggested_fix="Include both contributions (negative) and the current value (positive)",
            ))

        for index in range(1, len(cashflows)):
            if cashflows[index].date < cashflows[index - 1].date:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="unsorted",
                    message=(
                        f"Cash flows are not in date order (entry {index + 1} is earlier "
                        f"than entry {index}); the first entry ({cashflows[0].date}) "
                        "is used as day zero"
                    ),
                    severity="warning",
                    record_index=index,
                    suggested_fix="Sort entries by date if the earliest should be day zero",
                ))
                break

        for index, cf in enumerate(cashflows):
            if cf.amount == 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="zero_amount",
                    message=f"Entry {index + 1} has a zero amount and does not affect the rate",
                    severity="info",
                    record_index=index,
                ))

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        for index, cf in enumerate(cashflows):
            if cf.date > max_future_date:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Entry {index + 1} is dated in the future ({cf.date})",
                    severity="warning",
                    record_index=index,
                    suggested_fix="Please verify the date is correct",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _build_result(
        self,
        record_count: int,
        schema_valid: bool,
        semantic_valid: bool,
        cashflow_count: int,
        issues: list[ValidationIssue],
    ) -> ValidationResult:
        warnings = [issue.message for issue in issues if issue.severity == "warning"]
        return ValidationResult(
            record_count=record_count,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            can_calculate=schema_valid and cashflow_count > 0,
            issues=issues,
            warnings=warnings,
        )

    def parse_records(
        self,
        records: list[RawCashFlowRecord],
    ) -> tuple[list[CashFlow], ValidationResult]:
        """
        Run the full two-stage pipeline on raw ledger records.

        Args:
            records: Records in ledger order

        Returns:
            (cashflows, result). cashflows keeps the ledger order and holds
            only the records that parsed.
        """
        all_issues = []

        schema_valid, cashflows, schema_issues = self._validate_schema(records)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(cashflows)
            all_issues.extend(semantic_issues)

        result = self._build_result(
            record_count=len(records),
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            cashflow_count=len(cashflows),
            issues=all_issues,
        )
        return cashflows, result

    def validate(self, cashflows: list[CashFlow]) -> ValidationResult:
        """
        Run stage 2 on cash flows that are already typed.

        An empty list fails stage 1.
        """
        if not cashflows:
            _, _, issues = self._validate_schema([])
            return self._build_result(0, False, False, 0, issues)

        semantic_valid, issues = self._validate_semantic(cashflows)
        return self._build_result(
            record_count=len(cashflows),
            schema_valid=True,
            semantic_valid=semantic_valid,
            cashflow_count=len(cashflows),
            issues=issues,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("❌ Some entries could not be read:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        lines.append("")
        if result.can_calculate:
            lines.append("The return can still be calculated, but may show as N/A.")
        else:
            lines.append("Please fix the issues above before calculating returns.")

        return "\n".join(lines)
