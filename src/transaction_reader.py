import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterator, Optional, TextIO

from exceptions import RecordParseError
from models import Transaction, TransactionType, MAX_AMOUNT, MAX_CLIENT_ID, MAX_TRANSACTION_ID

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_DECIMAL_PLACES = 4

# ASCII digits only; int() and Decimal() would also take underscores and other scripts.
ID_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Yield transactions from a CSV stream in file order.
    The first malformed record raises RecordParseError.
    """
    reader = csv.DictReader(stream)
    try:
        fieldnames = reader.fieldnames
        if fieldnames is None:
            return

        columns = {name.strip() for name in fieldnames}
        missing = [column for column in REQUIRED_COLUMNS if column not in columns]
        if missing:
            raise RecordParseError(f"missing required columns: {', '.join(missing)}", line_number=1)

        for row in reader:
            yield parse_row(row, line_number=reader.line_num)
    except csv.Error as e:
        raise RecordParseError(f"malformed CSV: {e}", line_number=reader.line_num) from e


def parse_row(row: Dict[str, Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    normalized = {
        (k or "").strip(): (v or "").strip()
        for k, v in row.items()
        if not isinstance(v, list)
    }

    transaction_type = _parse_type(normalized.get("type", ""), line_number)
    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        if transaction_type.carries_amount:
            amount = _parse_amount(amount_str, line_number)
        else:
            logger.debug(f"Line {line_number}: ignoring amount on {transaction_type.value}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_type(value: str, line_number: Optional[int]) -> TransactionType:
    try:
        transaction_type = TransactionType(value.lower())
    except ValueError:
        transaction_type = TransactionType.UNKNOWN

    if transaction_type == TransactionType.UNKNOWN:
        raise RecordParseError(f"unrecognized transaction type {value!r}", line_number)
    return transaction_type


def _parse_id(value: str, field: str, upper_bound: int, line_number: Optional[int]) -> int:
    if not ID_PATTERN.fullmatch(value):
        raise RecordParseError(f"invalid {field} {value!r}", line_number)

    parsed = int(value)
    if parsed > upper_bound:
        raise RecordParseError(f"{field} {parsed} out of range 0..{upper_bound}", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise RecordParseError(f"invalid amount {value!r}", line_number)

    amount = Decimal(value)
    if amount < 0:
        raise RecordParseError(f"amount must not be negative, got {value!r}", line_number)
    if -amount.as_tuple().exponent > AMOUNT_DECIMAL_PLACES:
        raise RecordParseError(
            f"amount {value!r} has more than {AMOUNT_DECIMAL_PLACES} decimal places", line_number
        )
    if amount > MAX_AMOUNT:
        raise RecordParseError(f"amount {value!r} exceeds {MAX_AMOUNT}", line_number)
    return amount
