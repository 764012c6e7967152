"""Exception hierarchy for the payments engine.

Only I/O and input-format problems are errors. Business-rule rejections
(insufficient funds, unknown transaction references, locked accounts) are
silent no-ops inside the engine and never raise.
"""

from typing import Optional


class PaymentsError(Exception):
    """Base exception for all payments engine errors."""


class InputFileError(PaymentsError):
    """The transactions file could not be opened or read."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read {path}: {cause}")


class RecordParseError(PaymentsError):
    """A transaction record is malformed."""

    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        if line_number is None:
            super().__init__(reason)
        else:
            super().__init__(f"Line {line_number}: {reason}")


class UnknownTransactionTypeError(PaymentsError):
    """The UNKNOWN sentinel reached the engine; input validation was bypassed."""

    def __init__(self, transaction):
        self.transaction = transaction
        super().__init__(f"Cannot apply transaction of unknown type: {transaction}")
