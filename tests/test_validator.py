"""
Tests for the two-stage cash flow validator.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from investment_returns.config import AppSettings
from investment_returns.models.cashflow import CashFlow, RawCashFlowRecord
from investment_returns.validation import (
    CashFlowValidator,
    RecordParseError,
    parse_amount,
    parse_date,
)

TODAY = date(2025, 1, 1)


@pytest.fixture
def validator():
    return CashFlowValidator(settings=AppSettings(), today=TODAY)


def records(*pairs):
    return [RawCashFlowRecord(date=d, amount=a) for d, a in pairs]


class TestParseDate:
    """Tests for ledger date conversion."""

    @pytest.mark.parametrize("text", ["2024-01-15", "15/01/2024", "15-01-2024"])
    def test_supported_formats(self, text):
        """Test the accepted string layouts."""
        assert parse_date(text) == date(2024, 1, 15)

    def test_iso_datetime_string(self):
        """Test a full ISO timestamp keeps only the day."""
        assert parse_date("2024-01-15T10:30:00") == date(2024, 1, 15)

    def test_datetime_is_truncated(self):
        """Test a datetime becomes a plain date."""
        parsed = parse_date(datetime(2024, 1, 15, 18, 0))
        assert parsed == date(2024, 1, 15)
        assert not isinstance(parsed, datetime)

    def test_date_passes_through(self):
        """Test a date is returned unchanged."""
        assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024/13/45", 20240115])
    def test_rejects_garbage(self, value):
        """Test unparseable values raise RecordParseError."""
        with pytest.raises(RecordParseError):
            parse_date(value)


class TestParseAmount:
    """Tests for ledger amount conversion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1000, 1000.0),
            (-250.5, -250.5),
            (Decimal("1234.56"), 1234.56),
            ("1,000", 1000.0),
            ("-1,000", -1000.0),
            ("₹1,250.50", 1250.50),
            ("-₹500", -500.0),
            ("Rs. 2,000", 2000.0),
            ("INR 75", 75.0),
            (" 42 ", 42.0),
        ],
    )
    def test_accepted_inputs(self, value, expected):
        """Test numbers and formatted strings convert to floats."""
        assert parse_amount(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "value",
        ["abc", "", "NaN", "inf", float("nan"), float("inf"), True, None, [1]],
    )
    def test_rejects_non_numbers(self, value):
        """Test non-numeric and non-finite amounts raise RecordParseError."""
        with pytest.raises(RecordParseError):
            parse_amount(value)

    @pytest.mark.parametrize("value", ["1e400", "-1e400", 10 ** 400, Decimal("1e999")])
    def test_rejects_amounts_beyond_float_range(self, value):
        """Test finite amounts too large for a float raise RecordParseError."""
        with pytest.raises(RecordParseError, match="out of range"):
            parse_amount(value)

    def test_parse_error_is_value_error(self):
        """Test callers can catch parse failures as ValueError."""
        with pytest.raises(ValueError):
            parse_amount("twelve")


class TestSchemaValidation:
    """Tests for stage 1."""

    def test_empty_records(self, validator):
        """Test that an empty ledger cannot be calculated."""
        cashflows, result = validator.parse_records([])
        assert cashflows == []
        assert result.schema_valid is False
        assert result.can_calculate is False
        assert result.issues[0].issue_type == "empty"

    def test_valid_records(self, validator):
        """Test that clean records parse in ledger order."""
        cashflows, result = validator.parse_records(
            records(("01/01/2024", "-1,000"), ("2024-12-31", "₹1,100"))
        )
        assert result.is_valid is True
        assert result.can_calculate is True
        assert result.record_count == 2
        assert cashflows == [
            CashFlow(date=date(2024, 1, 1), amount=-1000.0),
            CashFlow(date=date(2024, 12, 31), amount=1100.0),
        ]

    def test_missing_amount(self, validator):
        """Test a record without an amount is an error."""
        _, result = validator.parse_records(records(("2024-01-01", None), ("2024-06-01", 10)))
        assert result.schema_valid is False
        assert result.can_calculate is False
        assert result.issues[0].field == "amount"
        assert result.issues[0].issue_type == "missing"
        assert result.issues[0].record_index == 0

    def test_invalid_date_is_reported_with_source_id(self, validator):
        """Test error messages name the ledger entry."""
        raw = [RawCashFlowRecord(date="soon", amount=-10, source_id="row-7")]
        cashflows, result = validator.parse_records(raw)
        assert cashflows == []
        assert result.error_count == 1
        assert "row-7" in result.issues[0].message
        assert result.issues[0].suggested_fix is not None

    def test_oversized_amount_is_reported(self, validator):
        """Test an amount beyond float range is an error, not an exception."""
        cashflows, result = validator.parse_records(
            records(("2023-01-01", "-100"), ("2024-01-01", "1e400"))
        )
        assert [cf.amount for cf in cashflows] == [-100.0]
        assert result.schema_valid is False
        assert result.can_calculate is False
        assert result.issues[0].issue_type == "invalid_format"
        assert result.issues[0].record_index == 1

    def test_bad_records_are_left_out(self, validator):
        """Test only parseable records reach the cash flow list."""
        cashflows, result = validator.parse_records(
            records(("2024-01-01", -100), ("bad", 5), ("2024-12-31", 110))
        )
        assert len(cashflows) == 2
        assert result.semantic_valid is False


class TestSemanticValidation:
    """Tests for stage 2."""

    def test_unsorted_records_warn_but_keep_order(self, validator):
        """Test out-of-order records are reported, not reordered."""
        cashflows, result = validator.parse_records(
            records(("2024-12-31", 110), ("2024-01-01", -100))
        )
        assert cashflows[0].date == date(2024, 12, 31)
        assert result.is_valid is True
        assert any(i.issue_type == "unsorted" for i in result.issues)
        assert any("day zero" in w for w in result.warnings)

    def test_one_sided_flows_warn(self, validator):
        """Test only-outflow ledgers get a warning."""
        _, result = validator.parse_records(
            records(("2024-01-01", -100), ("2024-06-01", -100))
        )
        assert result.is_valid is True
        assert any(i.issue_type == "one_sided" for i in result.issues)
        assert "No inflow found" in result.warnings[0]

    def test_zero_amount_is_info(self, validator):
        """Test zero amounts are informational only."""
        _, result = validator.parse_records(
            records(("2024-01-01", -100), ("2024-03-01", 0), ("2024-12-31", 110))
        )
        zero = [i for i in result.issues if i.issue_type == "zero_amount"]
        assert len(zero) == 1
        assert zero[0].severity == "info"
        assert result.warnings == []

    def test_future_date_warns(self, validator):
        """Test dates after today are flagged."""
        _, result = validator.parse_records(
            records(("2024-01-01", -100), ("2025-01-05", 110))
        )
        assert any(i.issue_type == "future_date" for i in result.issues)

    def test_future_date_tolerance(self):
        """Test the configured tolerance allows near-future dates."""
        validator = CashFlowValidator(
            settings=AppSettings(future_date_tolerance_days=10),
            today=TODAY,
        )
        _, result = validator.parse_records(
            records(("2024-01-01", -100), ("2025-01-05", 110))
        )
        assert not any(i.issue_type == "future_date" for i in result.issues)

    def test_validate_typed_cash_flows(self, validator):
        """Test stage 2 runs directly on CashFlow objects."""
        result = validator.validate([
            CashFlow(date=date(2024, 1, 1), amount=-100.0),
            CashFlow(date=date(2024, 12, 31), amount=110.0),
        ])
        assert result.is_valid is True
        assert result.can_calculate is True

    def test_validate_empty_list(self, validator):
        """Test an empty typed list fails stage 1."""
        result = validator.validate([])
        assert result.schema_valid is False
        assert result.can_calculate is False


class TestUserFriendlySummary:
    """Tests for the human-readable summary."""

    def test_clean_result(self, validator):
        """Test the all-clear message."""
        _, result = validator.parse_records(
            records(("2024-01-01", -100), ("2024-12-31", 110))
        )
        assert validator.get_user_friendly_summary(result) == "✅ All checks passed."

    def test_errors_are_listed(self, validator):
        """Test errors and their fixes are shown."""
        _, result = validator.parse_records(records(("2024-01-01", "abc")))
        summary = validator.get_user_friendly_summary(result)
        assert "❌" in summary
        assert "Enter the amount as a plain number" in summary
        assert "Please fix the issues above" in summary

    def test_warnings_are_listed(self, validator):
        """Test warnings still allow calculation."""
        _, result = validator.parse_records(
            records(("2024-12-31", 110), ("2024-01-01", -100))
        )
        summary = validator.get_user_friendly_summary(result)
        assert "⚠️" in summary
        assert "can still be calculated" in summary
