from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Every stored tx id adds at most this much, so any balance stays below
# 10**24 and keeps 4 decimal places inside the 28-digit decimal context.
MAX_AMOUNT = Decimal("100000000000000")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"
    # Never produced by the parser; reaching the engine with it is a bug.
    UNKNOWN = "unknown"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NONE = "none"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount


class ProcessingStats:
    """Counters for applied and ignored transactions, broken down by type."""

    def __init__(self):
        self.applied: Counter = Counter()
        self.ignored: Counter = Counter()

    def record(self, transaction_type: TransactionType, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied[transaction_type] += 1
        else:
            self.ignored[transaction_type] += 1

    @property
    def processed(self) -> int:
        return sum(self.applied.values()) + sum(self.ignored.values())

    def summary(self) -> str:
        return (
            f"Processed: {self.processed}, "
            f"Applied: {sum(self.applied.values())}, "
            f"Ignored: {sum(self.ignored.values())}"
        )
