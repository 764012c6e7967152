import logging
from typing import Dict, Iterable, Optional, TextIO

from exceptions import InputFileError
from models import Transaction, ClientAccount, DisputeState, ProcessingResult, ProcessingStats
from state import StateManager
from processor import TransactionProcessor
from transaction_reader import read_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Owns the state of one processing run and applies transactions to it
    strictly in arrival order.
    """

    def __init__(self, strict_disputes: bool = False):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state, strict_disputes=strict_disputes)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> None:
        """Apply one transaction. Business-rule rejections are silent."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(transaction.transaction_type, result)
        if result == ProcessingResult.IGNORED:
            logger.debug(f"Ignored {transaction}")

    def set_lock(self, client_id: int, locked: bool) -> None:
        """Lock or unlock a client account, creating it if needed."""
        account = self._state.get_or_create_account(client_id)
        account.locked = locked
        logger.info(f"Account {client_id} {'locked' if locked else 'unlocked'} by operator")

    def query(self, client_id: int) -> Optional[ClientAccount]:
        """Snapshot of a client account, or None if the client was never referenced."""
        return self._state.get_account(client_id)

    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def dispute_state(self, transaction_id: int) -> DisputeState:
        return self._state.get_dispute_state(transaction_id)

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return final account states."""
        for transaction in transactions:
            self.apply(transaction)
        return self.accounts()

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        return self.process(read_transactions(stream))

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        try:
            f = open(filepath, "r", newline="")
        except OSError as e:
            raise InputFileError(filepath, e) from e

        with f:
            try:
                accounts = self.process_stream(f)
            except (OSError, UnicodeDecodeError) as e:
                raise InputFileError(filepath, e) from e

        logger.info(self._stats.summary())
        return accounts
