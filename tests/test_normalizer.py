from datetime import date

import pytest

from household_ledger.services.ingestion.decoder import GridRow
from household_ledger.services.ingestion.errors import (
    InvalidAmount,
    InvalidDate,
    InvalidValue,
    MissingName,
)
from household_ledger.services.ingestion.normalizer import (
    normalize_holding,
    normalize_transaction,
    parse_date,
    parse_number,
)

SINGLE = {"date": 0, "description": 1, "amount": 2, "withdrawal": None, "deposit": None}
SPLIT = {"date": 0, "description": 1, "amount": None, "withdrawal": 2, "deposit": 3}
HOLDING = {"name": 0, "type": 1, "value": 2, "quantity": None}


def row(*cells, line_number=2):
    return GridRow(line_number=line_number, raw_line=",".join(cells), cells=list(cells))


class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [
        ("$1,234.56", 1234.56),
        ("-4.50", -4.5),
        ("2000", 2000.0),
        ("(12.50)", 12.5),
        ("USD 10", 10.0),
    ])
    def test_valid(self, raw, expected):
        assert parse_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "   ", "n/a", None])
    def test_empty(self, raw):
        assert parse_number(raw) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_number("1.2.3")

    def test_overflow_raises(self):
        with pytest.raises(ValueError):
            parse_number("9" * 400)


class TestParseDate:
    @pytest.mark.parametrize("raw", [
        "2024-01-31",
        "2024/01/31",
        "01/31/2024",
        "31/01/2024",
        "31.01.2024",
        "Jan 31, 2024",
        "31 Jan 2024",
    ])
    def test_formats(self, raw):
        assert parse_date(raw) == date(2024, 1, 31)

    def test_month_first_when_ambiguous(self):
        assert parse_date("02/03/2024") == date(2024, 2, 3)

    @pytest.mark.parametrize("raw", ["not-a-date", "", "2024-02-30", "13/13/2024"])
    def test_invalid(self, raw):
        assert parse_date(raw) is None


class TestNormalizeTransaction:
    def test_negative_amount_is_expense(self, household):
        record = normalize_transaction(row("2024-01-01", "Coffee", "-4.50"), SINGLE, household)
        assert record.amount == 4.5
        assert record.type == "expense"
        assert record.date == date(2024, 1, 1)
        assert record.description == "Coffee"
        assert record.owner_scope == "household"
        assert record.owner_id == "house-1"
        assert record.kind == "transaction"

    def test_positive_amount_is_income(self, household):
        record = normalize_transaction(row("2024-01-02", "Salary", "2000.00"), SINGLE, household)
        assert record.amount == 2000.0
        assert record.type == "income"

    def test_withdrawal_column(self, household):
        record = normalize_transaction(row("2024-01-01", "Coffee", "4.50", ""), SPLIT, household)
        assert (record.amount, record.type) == (4.5, "expense")

    def test_deposit_column(self, household):
        record = normalize_transaction(row("2024-01-02", "Salary", "", "2000.00"), SPLIT, household)
        assert (record.amount, record.type) == (2000.0, "income")

    def test_withdrawal_wins_over_deposit(self, household):
        record = normalize_transaction(row("2024-01-02", "Odd", "10", "99"), SPLIT, household)
        assert (record.amount, record.type) == (10.0, "expense")

    def test_negative_withdrawal_is_taken_as_magnitude(self, household):
        record = normalize_transaction(row("2024-01-02", "Fee", "-3.00", ""), SPLIT, household)
        assert (record.amount, record.type) == (3.0, "expense")

    def test_both_columns_empty(self, household):
        with pytest.raises(InvalidAmount) as exc:
            normalize_transaction(row("2024-01-02", "Nothing", "", ""), SPLIT, household)
        assert exc.value.reason == "Invalid or zero amount"

    @pytest.mark.parametrize("amount", ["0", "0.00", "", "1.2.3"])
    def test_unusable_single_amount(self, household, amount):
        with pytest.raises(InvalidAmount):
            normalize_transaction(row("2024-01-02", "Zero", amount), SINGLE, household)

    def test_overflowing_single_amount(self, household):
        with pytest.raises(InvalidAmount) as exc:
            normalize_transaction(row("2024-01-01", "Big", "9" * 400), SINGLE, household)
        assert exc.value.reason == "Invalid or zero amount"

    def test_overflowing_withdrawal(self, household):
        with pytest.raises(InvalidAmount):
            normalize_transaction(row("2024-01-01", "Big", "9" * 400, ""), SPLIT, household)

    def test_invalid_date(self, household):
        with pytest.raises(InvalidDate) as exc:
            normalize_transaction(row("not-a-date", "Coffee", "-4.50"), SINGLE, household)
        assert exc.value.reason == "Invalid date format"
        assert exc.value.code == "InvalidDate"

    def test_date_checked_before_amount(self, household):
        with pytest.raises(InvalidDate):
            normalize_transaction(row("nope", "Coffee", "0"), SINGLE, household)

    def test_short_row(self, household):
        with pytest.raises(InvalidAmount):
            normalize_transaction(row("2024-01-02", "Coffee"), SINGLE, household)

    def test_category_from_description(self, household):
        record = normalize_transaction(row("2024-01-03", "STARBUCKS #123", "-5.25"), SINGLE, household)
        assert record.category == "Dining"

    def test_default_category(self, household):
        record = normalize_transaction(
            row("2024-01-03", "Mystery vendor", "-5.25"), SINGLE, household, default_category="Misc"
        )
        assert record.category == "Misc"

    def test_ids_are_unique(self, household):
        a = normalize_transaction(row("2024-01-01", "Coffee", "-4.50"), SINGLE, household)
        b = normalize_transaction(row("2024-01-01", "Coffee", "-4.50"), SINGLE, household)
        assert a.id != b.id


class TestNormalizeHolding:
    def test_currency_value(self, personal):
        record = normalize_holding(row("Vanguard Total", "ETF", "$1,234.56"), HOLDING, personal)
        assert record.value == 1234.56
        assert record.type == "ETF"
        assert record.quantity is None
        assert record.owner_scope == "personal"
        assert record.kind == "holding"

    def test_type_defaults_to_other(self, personal):
        record = normalize_holding(row("Savings", "", "500"), HOLDING, personal)
        assert record.type == "Other"

    def test_unmapped_type(self, personal):
        mapping = {"name": 0, "type": None, "value": 1, "quantity": None}
        record = normalize_holding(row("Savings", "500"), mapping, personal)
        assert record.type == "Other"

    def test_missing_name(self, personal):
        with pytest.raises(MissingName) as exc:
            normalize_holding(row("", "ETF", "100"), HOLDING, personal)
        assert exc.value.reason == "Missing asset name"

    @pytest.mark.parametrize("value", ["", "n/a", "1.2.3"])
    def test_invalid_value(self, personal, value):
        with pytest.raises(InvalidValue) as exc:
            normalize_holding(row("Fund", "ETF", value), HOLDING, personal)
        assert exc.value.reason == "Invalid value"

    def test_overflowing_value(self, personal):
        with pytest.raises(InvalidValue) as exc:
            normalize_holding(row("Big", "ETF", "9" * 400), HOLDING, personal)
        assert exc.value.reason == "Invalid value"

    def test_quantity(self, personal):
        mapping = {"name": 0, "type": None, "value": 2, "quantity": 1}
        record = normalize_holding(row("VTI", "10", "2500"), mapping, personal)
        assert record.quantity == 10.0

    def test_bad_quantity(self, personal):
        mapping = {"name": 0, "type": None, "value": 2, "quantity": 1}
        with pytest.raises(InvalidValue) as exc:
            normalize_holding(row("VTI", "abc.def", "2500"), mapping, personal)
        assert exc.value.reason == "Invalid quantity"
