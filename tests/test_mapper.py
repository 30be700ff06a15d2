import pytest

from household_ledger.services.ingestion.errors import MappingIncomplete
from household_ledger.services.ingestion.mapper import (
    auto_map,
    describe_mapping,
    is_empty_mapping,
    manual_map,
    resolve_mapping,
    validate_mapping,
)
from household_ledger.services.ingestion.schema import HOLDING_SCHEMA, TRANSACTION_SCHEMA


class TestAutoMap:
    def test_single_amount_statement(self):
        mapping = auto_map(["Date", "Description", "Amount"], TRANSACTION_SCHEMA)
        assert mapping == {
            "date": 0,
            "description": 1,
            "amount": 2,
            "withdrawal": None,
            "deposit": None,
        }

    def test_value_date_is_skipped(self):
        mapping = auto_map(["Value Date", "Booking Date", "Payee", "Amount"], TRANSACTION_SCHEMA)
        assert mapping["date"] == 1
        assert mapping["description"] == 2

    def test_withdrawal_and_deposit_columns_are_not_the_amount(self):
        header = ["Date", "Memo", "Withdrawal Amount", "Deposit Amount"]
        mapping = auto_map(header, TRANSACTION_SCHEMA)
        assert mapping["amount"] is None
        assert mapping["withdrawal"] == 2
        assert mapping["deposit"] == 3

    def test_debit_and_credit_columns(self):
        mapping = auto_map(["Date", "Description", "Debit Amount", "Credit Amount"], TRANSACTION_SCHEMA)
        assert mapping["amount"] is None
        assert mapping["withdrawal"] == 2
        assert mapping["deposit"] == 3

    def test_first_match_wins(self):
        mapping = auto_map(["Date", "Description", "Memo", "Amount"], TRANSACTION_SCHEMA)
        assert mapping["description"] == 1

    def test_case_insensitive(self):
        mapping = auto_map(["DATE", "MERCHANT", "AMOUNT"], TRANSACTION_SCHEMA)
        assert mapping["date"] == 0
        assert mapping["description"] == 1
        assert mapping["amount"] == 2

    def test_holdings(self):
        mapping = auto_map(["Symbol", "Asset Class", "Quantity", "Market Value"], HOLDING_SCHEMA)
        assert mapping == {"name": 0, "type": 1, "value": 3, "quantity": 2}


class TestManualMap:
    HEADER = ["Date", "Description", "Amount"]

    def test_index_digit_string_and_column_name(self):
        mapping = manual_map(
            {"date": "date", "description": 1, "amount": "2"},
            self.HEADER,
            TRANSACTION_SCHEMA,
        )
        assert mapping["date"] == 0
        assert mapping["description"] == 1
        assert mapping["amount"] == 2

    def test_amount_single_alias(self):
        mapping = manual_map({"amountSingle": 2}, self.HEADER, TRANSACTION_SCHEMA)
        assert mapping["amount"] == 2

    def test_unknown_fields_are_ignored(self):
        mapping = manual_map({"date": 0, "balance": 5}, self.HEADER, TRANSACTION_SCHEMA)
        assert "balance" not in mapping

    def test_unknown_column_name_is_unmapped(self):
        mapping = manual_map({"description": "Payee"}, self.HEADER, TRANSACTION_SCHEMA)
        assert mapping["description"] is None

    def test_no_keyword_inference(self):
        mapping = manual_map({"date": 0}, self.HEADER, TRANSACTION_SCHEMA)
        assert mapping["description"] is None
        assert mapping["amount"] is None


class TestIsEmptyMapping:
    @pytest.mark.parametrize("explicit", [None, {}, {"date": ""}, {"date": None, "amount": "  "}])
    def test_empty(self, explicit):
        assert is_empty_mapping(explicit)

    def test_zero_index_is_not_empty(self):
        assert not is_empty_mapping({"date": 0})


class TestValidateMapping:
    def test_missing_description(self):
        with pytest.raises(MappingIncomplete) as exc:
            validate_mapping(
                {"date": 0, "description": None, "amount": 2, "withdrawal": None, "deposit": None},
                TRANSACTION_SCHEMA,
            )
        assert exc.value.missing_fields == ["description"]

    def test_no_amount_column_at_all(self):
        with pytest.raises(MappingIncomplete) as exc:
            validate_mapping(
                {"date": 0, "description": 1, "amount": None, "withdrawal": None, "deposit": None},
                TRANSACTION_SCHEMA,
            )
        assert exc.value.missing_fields == ["amount or withdrawal or deposit"]

    def test_withdrawal_alone_is_enough(self):
        validate_mapping(
            {"date": 0, "description": 1, "amount": None, "withdrawal": 2, "deposit": None},
            TRANSACTION_SCHEMA,
        )

    def test_index_past_header_width(self):
        with pytest.raises(MappingIncomplete):
            validate_mapping({"name": 0, "value": 7}, HOLDING_SCHEMA, width=3)

    def test_holdings_need_name_and_value(self):
        with pytest.raises(MappingIncomplete) as exc:
            validate_mapping({"name": None, "value": None, "type": 0}, HOLDING_SCHEMA)
        assert exc.value.missing_fields == ["name", "value"]


class TestResolveMapping:
    def test_empty_explicit_mapping_falls_back_to_auto(self):
        mapping = resolve_mapping(["Date", "Description", "Amount"], TRANSACTION_SCHEMA, {"date": ""})
        assert mapping["description"] == 1

    def test_manual_mapping_is_validated(self):
        with pytest.raises(MappingIncomplete) as exc:
            resolve_mapping(
                ["Date", "Description", "Amount"],
                TRANSACTION_SCHEMA,
                {"date": 0, "amount": 2},
            )
        assert "description" in exc.value.missing_fields

    def test_out_of_range_manual_index(self):
        with pytest.raises(MappingIncomplete):
            resolve_mapping(
                ["Date", "Description", "Amount"],
                TRANSACTION_SCHEMA,
                {"date": 0, "description": 1, "amount": 9},
            )

    def test_headerless_file_allows_any_index(self):
        mapping = resolve_mapping([], TRANSACTION_SCHEMA, {"date": 0, "description": 1, "amount": 4})
        assert mapping["amount"] == 4


def test_describe_mapping():
    described = describe_mapping({"date": 0, "amount": None}, ["Date", "Amount"])
    assert described == {
        "date": {"index": 0, "column": "Date"},
        "amount": {"index": None, "column": None},
    }
