"""Tests for shared serialization utilities."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from txn_mirror.exceptions import StoreError
from txn_mirror.models import AccountType, Balances
from txn_mirror.serialization import record_from_dict, record_to_dict, serialize_value, to_dict


@dataclass
class _SampleData:
    name: str
    amount: Decimal
    created_at: datetime


class TestToDict:
    """Tests for to_dict function."""

    def test_dataclass(self) -> None:
        obj = _SampleData(name="test", amount=Decimal("100.50"), created_at=datetime(2024, 1, 1))
        result = to_dict(obj)
        assert result["name"] == "test"
        assert result["amount"] == "100.50"
        assert result["created_at"] == "2024-01-01T00:00:00"

    def test_dict_passthrough(self) -> None:
        d = {"key": "value"}
        assert to_dict(d) == d

    def test_other_type(self) -> None:
        assert to_dict(42) == {"value": "42"}

    def test_nested_dataclass(self) -> None:
        result = to_dict(Balances(current=Decimal("1.10"), limit=Decimal("5")))
        assert result == {"current": "1.10", "available": None, "limit": "5", "iso_currency_code": None}


class TestSerializeValue:
    """Tests for serialize_value function."""

    def test_enum(self) -> None:
        assert serialize_value(AccountType.CREDIT) == "credit"

    def test_date(self) -> None:
        assert serialize_value(date(2024, 2, 29)) == "2024-02-29"

    def test_list_and_dict(self) -> None:
        assert serialize_value({"a": [Decimal("1"), None]}) == {"a": ["1", None]}

    def test_plain_value(self) -> None:
        assert serialize_value("x") == "x"


class TestRecordDict:
    """Tests for record_to_dict / record_from_dict."""

    def test_record_shape(self, make_record) -> None:
        data = record_to_dict(make_record("A", pending_id="P"))

        assert data == {
            "id": "A",
            "date": "2024-01-01",
            "amount": "-10.00",
            "pending": False,
            "account_ref": "Everyday Checking",
            "category": "Food and Drink",
            "subcategory": "Restaurants",
            "channel": "in store",
            "name": "Cafe",
            "internal": False,
            "notes": "",
            "pending_id": "P",
        }

    def test_optional_fields_default(self) -> None:
        record = record_from_dict(
            {
                "id": "A",
                "date": "2024-01-01",
                "amount": "-1",
                "pending": True,
                "account_ref": "Checking",
                "category": "UNKNOWN",
                "subcategory": "UNKNOWN",
                "channel": "UNKNOWN",
            }
        )

        assert record.name == ""
        assert record.notes == ""
        assert record.internal is False
        assert record.pending_id is None

    def test_missing_field(self, make_record) -> None:
        data = record_to_dict(make_record("A"))
        del data["amount"]

        with pytest.raises(StoreError, match="Corrupt stored record"):
            record_from_dict(data)

    @pytest.mark.parametrize("field,value", [("date", "01/02/2024"), ("amount", "ten")])
    def test_bad_value(self, make_record, field: str, value: str) -> None:
        data = record_to_dict(make_record("A"))
        data[field] = value

        with pytest.raises(StoreError, match="Corrupt stored record"):
            record_from_dict(data)
