#!/usr/bin/env python3
"""Generate random transaction CSV files for exercising the payments engine.

The output deliberately contains records the engine will drop: withdrawals
that overdraw, disputes of unknown transactions and resolves/chargebacks of
transactions that were never disputed.
"""
import argparse
import csv
import random
import sys
from decimal import Decimal
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO

from models import Transaction, TransactionType, MAX_CLIENT_ID, MAX_TRANSACTION_ID

INPUT_COLUMNS = ("type", "client", "tx", "amount")
FOUR_PLACES = Decimal("0.0001")

# (deposit, withdrawal, dispute, resolve, chargeback)
TRANSACTION_WEIGHTS = (50, 30, 10, 6, 4)
TRANSACTION_TYPES = (
    TransactionType.DEPOSIT,
    TransactionType.WITHDRAWAL,
    TransactionType.DISPUTE,
    TransactionType.RESOLVE,
    TransactionType.CHARGEBACK,
)

# Share of dispute-like records pointing at a transaction id that was never issued.
UNKNOWN_REFERENCE_RATE = 0.1


def random_amount(rng: random.Random, low: float = 0.1, high: float = 500.0) -> Decimal:
    """Sum of three uniform draws, rounded to 4 decimal places."""
    total = sum(rng.uniform(low, high) for _ in range(3))
    return Decimal(total).quantize(FOUR_PLACES)


def generate_transactions(
    num_transactions: int,
    num_clients: int,
    rng: Optional[random.Random] = None,
) -> Iterator[Transaction]:
    """Return an iterator of num_transactions random transactions across clients 1..num_clients."""
    if num_transactions < 0:
        raise ValueError("num_transactions must not be negative")
    if not 1 <= num_clients <= MAX_CLIENT_ID:
        raise ValueError(f"num_clients must be within 1..{MAX_CLIENT_ID}")
    if num_transactions > MAX_TRANSACTION_ID:
        raise ValueError(f"num_transactions must not exceed {MAX_TRANSACTION_ID}")

    return _generate(num_transactions, num_clients, rng or random.Random())


def _generate(num_transactions: int, num_clients: int, rng: random.Random) -> Iterator[Transaction]:
    issued: List[Transaction] = []
    next_tx_id = 1

    for _ in range(num_transactions):
        transaction_type = rng.choices(TRANSACTION_TYPES, weights=TRANSACTION_WEIGHTS, k=1)[0]

        if transaction_type.carries_amount or not issued:
            if not transaction_type.carries_amount:
                transaction_type = TransactionType.DEPOSIT
            transaction = Transaction(
                transaction_type=transaction_type,
                client_id=rng.randint(1, num_clients),
                transaction_id=next_tx_id,
                amount=random_amount(rng),
            )
            issued.append(transaction)
            next_tx_id += 1
        elif rng.random() < UNKNOWN_REFERENCE_RATE:
            transaction = Transaction(
                transaction_type=transaction_type,
                client_id=rng.randint(1, num_clients),
                transaction_id=min(next_tx_id + rng.randint(0, num_transactions), MAX_TRANSACTION_ID),
            )
        else:
            original = rng.choice(issued)
            transaction = Transaction(
                transaction_type=transaction_type,
                client_id=original.client_id,
                transaction_id=original.transaction_id,
            )

        yield transaction


def write_transactions(transactions: Iterator[Transaction], stream: TextIO) -> int:
    """Write transactions as CSV; returns the number of records written."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(INPUT_COLUMNS)
    count = 0
    for transaction in transactions:
        amount = "" if transaction.amount is None else f"{transaction.amount:f}"
        writer.writerow([
            transaction.transaction_type.value,
            transaction.client_id,
            transaction.transaction_id,
            amount,
        ])
        count += 1
    return count


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Emit a random transactions CSV for the payments engine.")
    parser.add_argument(
        "--transactions",
        type=int,
        default=10_000,
        help="Number of transaction records to emit.",
    )
    parser.add_argument(
        "--clients",
        type=int,
        default=100,
        help="Number of distinct client ids (1..65535).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible datasets.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("transactions.csv"),
        help="Where to write the CSV. Use '-' for stdout.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    rng = random.Random(args.seed)

    try:
        transactions = generate_transactions(args.transactions, args.clients, rng)
        if str(args.output) == "-":
            count = write_transactions(transactions, sys.stdout)
        else:
            with open(args.output, "w", newline="") as f:
                count = write_transactions(transactions, f)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: cannot write {args.output}: {e}", file=sys.stderr)
        return 1

    print(f"Generated {count} transactions for {args.clients} clients in {args.output}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
