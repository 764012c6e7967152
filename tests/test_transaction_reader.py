import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from exceptions import RecordParseError
from models import Transaction, TransactionType, MAX_AMOUNT
from transaction_reader import parse_row, read_transactions


def row(type_, client, tx, amount=""):
    return {"type": type_, "client": client, "tx": tx, "amount": amount}


class TestParseRow:
    def test_deposit(self):
        transaction = parse_row(row("deposit", "1", "2", "3.5"))
        assert transaction == Transaction(TransactionType.DEPOSIT, 1, 2, Decimal("3.5"))

    def test_whitespace_and_case_are_normalized(self):
        transaction = parse_row({" type": " Withdrawal ", " client": " 4", " tx": " 5 ", " amount": " 1.0001"})
        assert transaction == Transaction(TransactionType.WITHDRAWAL, 4, 5, Decimal("1.0001"))

    def test_dispute_has_no_amount(self):
        transaction = parse_row(row("dispute", "1", "2"))
        assert transaction.transaction_type == TransactionType.DISPUTE
        assert transaction.amount is None

    def test_amount_on_dispute_is_discarded(self):
        transaction = parse_row(row("chargeback", "1", "2", "10"))
        assert transaction.amount is None

    def test_missing_amount_column(self):
        transaction = parse_row({"type": "resolve", "client": "1", "tx": "2"})
        assert transaction.amount is None

    def test_extra_fields_are_ignored(self):
        transaction = parse_row({"type": "deposit", "client": "1", "tx": "2", "amount": "1", None: ["x", "y"]})
        assert transaction.amount == Decimal("1")

    def test_amount_forms(self):
        assert parse_row(row("deposit", "1", "1", "5.")).amount == Decimal("5")
        assert parse_row(row("deposit", "1", "1", ".25")).amount == Decimal("0.25")
        assert parse_row(row("deposit", "1", "1", "100000000000000")).amount == MAX_AMOUNT

    def test_id_bounds(self):
        assert parse_row(row("deposit", "65535", "4294967295", "1")).client_id == 65535
        assert parse_row(row("deposit", "0", "0", "1")).transaction_id == 0

    @pytest.mark.parametrize(
        "record, reason",
        [
            (row("transfer", "1", "1", "1"), "unrecognized transaction type"),
            (row("unknown", "1", "1", "1"), "unrecognized transaction type"),
            (row("", "1", "1", "1"), "unrecognized transaction type"),
            (row("deposit", "abc", "1", "1"), "invalid client"),
            (row("deposit", "-1", "1", "1"), "invalid client"),
            (row("deposit", "65536", "1", "1"), "client 65536 out of range"),
            (row("deposit", "1", "4294967296", "1"), "tx 4294967296 out of range"),
            (row("deposit", "1", "", "1"), "invalid tx"),
            (row("deposit", "1", "1", "ten"), "invalid amount"),
            (row("deposit", "1", "1", "-5"), "must not be negative"),
            (row("deposit", "1", "1", "NaN"), "invalid amount"),
            (row("withdrawal", "1", "1", "Infinity"), "invalid amount"),
            (row("deposit", "1", "1", "1.00001"), "more than 4 decimal places"),
            (row("deposit", "1_0", "1", "1"), "invalid client"),
            (row("deposit", "\u0661", "1", "1"), "invalid client"),
            (row("deposit", "1", "2_0", "1"), "invalid tx"),
            (row("deposit", "1", "1", "1_000.5"), "invalid amount"),
            (row("deposit", "1", "1", "\uff11.5"), "invalid amount"),
            (row("deposit", "1", "1", "1e3"), "invalid amount"),
            (row("deposit", "1", "1", "100000000000000.0001"), "exceeds"),
            (row("deposit", "1", "1", "100000000000000000000000000.5"), "exceeds"),
        ],
    )
    def test_malformed_records(self, record, reason):
        with pytest.raises(RecordParseError) as excinfo:
            parse_row(record, line_number=9)

        assert reason in excinfo.value.reason
        assert excinfo.value.line_number == 9
        assert str(excinfo.value).startswith("Line 9: ")


class TestReadTransactions:
    def test_reads_in_order(self):
        stream = io.StringIO("type,client,tx,amount\ndeposit,1,1,1.0\ndispute,1,1,\n")

        transactions = list(read_transactions(stream))

        assert [tx.transaction_type for tx in transactions] == [TransactionType.DEPOSIT, TransactionType.DISPUTE]

    def test_empty_input(self):
        assert list(read_transactions(io.StringIO(""))) == []

    def test_header_only(self):
        assert list(read_transactions(io.StringIO("type,client,tx,amount\n"))) == []

    def test_missing_required_column(self):
        stream = io.StringIO("type,client,amount\ndeposit,1,1.0\n")

        with pytest.raises(RecordParseError) as excinfo:
            list(read_transactions(stream))

        assert "tx" in excinfo.value.reason
        assert excinfo.value.line_number == 1

    def test_error_carries_line_number(self):
        stream = io.StringIO("type,client,tx,amount\ndeposit,1,1,1.0\ndeposit,1,x,1.0\n")

        with pytest.raises(RecordParseError) as excinfo:
            list(read_transactions(stream))

        assert excinfo.value.line_number == 3

    def test_reads_lazily(self):
        stream = io.StringIO("type,client,tx,amount\ndeposit,1,1,1.0\nbogus,1,2,1.0\n")
        transactions = read_transactions(stream)

        assert next(transactions).transaction_id == 1
        with pytest.raises(RecordParseError):
            next(transactions)
