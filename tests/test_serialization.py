"""Tests for shared serialization utilities and sinks."""

import json
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from microloan.engine.consolidation import consolidate
from microloan.exceptions import SinkError
from microloan.models import Loan, LoanStatus, Payment, PenaltyType
from microloan.sinks import ConsoleSink, JsonFileSink
from microloan.sinks.serialization import serialize_value, to_dict


@dataclass
class _SampleData:
    name: str
    amount: Decimal
    created_at: datetime


class TestToDict:
    """Tests for to_dict function."""

    def test_dataclass(self) -> None:
        obj = _SampleData(name="test", amount=Decimal("0.7143"), created_at=datetime(2025, 1, 1))
        result = to_dict(obj)
        assert result == {"name": "test", "amount": "0.7143", "created_at": "2025-01-01T00:00:00"}

    def test_dict_values_serialized(self) -> None:
        assert to_dict({"status": LoanStatus.IN_ARREARS}) == {"status": "MORA"}

    def test_other_type(self) -> None:
        assert to_dict(42) == {"value": "42"}

    def test_snapshot(self, daily_loan: Loan, ten_paid: list[Payment]) -> None:
        snapshot = consolidate(daily_loan, ten_paid, datetime(2025, 3, 17, 10, 0))
        data = to_dict(snapshot)

        assert data["status"] == "MORA"
        assert data["schedule"][0]["status"] == "PAID"
        assert data["schedule"][0]["due_date"] == "2025-03-04"
        assert data["cutoff"]["closes_at"] == "2025-03-17T23:59:59.999999"
        json.dumps(data)


class TestSerializeValue:
    """Tests for serialize_value function."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("21.43")) == "21.43"

    def test_enum(self) -> None:
        assert serialize_value(PenaltyType.WEEKLY_ARREARS) == "MORA_SEMANAL"

    def test_date_and_time(self) -> None:
        assert serialize_value(date(2025, 3, 17)) == "2025-03-17"
        assert serialize_value(time(0, 1)) == "00:01:00"

    def test_enum_keys(self) -> None:
        assert serialize_value({PenaltyType.WEEKLY_ARREARS: 20_000}) == {"MORA_SEMANAL": 20_000}

    def test_tuple_becomes_list(self) -> None:
        assert serialize_value((1, date(2025, 3, 4))) == [1, "2025-03-04"]

    def test_passthrough(self) -> None:
        assert serialize_value(5_000) == 5_000
        assert serialize_value(None) is None


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_write_batch(self, tmp_path, daily_loan: Loan) -> None:
        sink = JsonFileSink(tmp_path / "out", pretty=True)
        sink.write_batch("loans", [daily_loan])

        data = json.loads((tmp_path / "out" / "loans.json").read_text(encoding="utf-8"))
        assert data[0]["loan_id"] == daily_loan.loan_id
        assert data[0]["frequency"] == "daily"
        assert len(data[0]["schedule"]) == 24

    def test_close_prints_counts(self, tmp_path, capsys, daily_loan: Loan) -> None:
        sink = JsonFileSink(tmp_path)
        sink.write_batch("loans", [daily_loan])
        sink.close()
        assert "loans: 1 records" in capsys.readouterr().out

    def test_unwritable_directory(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(SinkError):
            JsonFileSink(blocker / "out")


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_write_batch(self, capsys, ten_paid: list[Payment]) -> None:
        sink = ConsoleSink(pretty=False, max_records=2)
        sink.write_batch("payments", ten_paid)
        out = capsys.readouterr().out

        assert "Entity: payments (10 records)" in out
        assert '"method": "efectivo"' in out
        assert "... and 8 more records" in out

    def test_close_summary(self, capsys, ten_paid: list[Payment]) -> None:
        sink = ConsoleSink()
        sink.write_batch("payments", ten_paid)
        sink.write_batch("payments", ten_paid)
        sink.close()
        assert "payments: 20 records" in capsys.readouterr().out
