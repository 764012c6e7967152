import logging
from typing import Optional

from exceptions import UnknownTransactionTypeError
from models import Transaction, TransactionType, ClientAccount, DisputeState, ProcessingResult
from state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state.

    Business-rule failures (insufficient funds, unknown references, locked
    accounts) never raise: the transaction is dropped and IGNORED is returned.

    With strict_disputes enabled, dispute/resolve/chargeback must target a
    transaction owned by the same client, and resolve/chargeback only act on
    a transaction that is currently disputed. Otherwise the only guard is
    whether the account holds enough funds.
    """

    def __init__(self, state: StateManager, strict_disputes: bool = False):
        self._state = state
        self._strict_disputes = strict_disputes

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: Balances or lock state changed
            IGNORED: Dropped by a business rule, state unchanged

        Raises:
            UnknownTransactionTypeError: the UNKNOWN sentinel was passed in
        """
        if transaction.transaction_type == TransactionType.UNKNOWN:
            raise UnknownTransactionTypeError(transaction)

        account = self._state.get_or_create_account(transaction.client_id)

        if account.locked:
            logger.info(f"{transaction}: account {account.client_id} is locked, dropping")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if not self._store(transaction):
            return ProcessingResult.IGNORED

        if transaction.amount is None:
            logger.info(f"Deposit tx {transaction.transaction_id}: no amount, skipping")
            return ProcessingResult.IGNORED

        account.credit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        # Stored even when the withdrawal fails, so it stays disputable.
        if not self._store(transaction):
            return ProcessingResult.IGNORED

        if transaction.amount is None:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: no amount, skipping")
            return ProcessingResult.IGNORED

        if account.available - transaction.amount < 0:
            logger.info(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._lookup_original(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if self._strict_disputes:
            dispute_state = self._state.get_dispute_state(original.transaction_id)
            if dispute_state in (DisputeState.DISPUTED, DisputeState.CHARGED_BACK):
                logger.info(f"Dispute for tx {original.transaction_id}: transaction is {dispute_state.value}")
                return ProcessingResult.IGNORED

        if account.available - original.amount < 0:
            logger.info(
                f"Dispute for tx {original.transaction_id}: available {account.available} "
                f"cannot cover {original.amount}"
            )
            return ProcessingResult.IGNORED

        account.hold(original.amount)
        self._state.set_dispute_state(original.transaction_id, DisputeState.DISPUTED)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._lookup_original(transaction)
        if original is None or not self._is_open_dispute(original):
            return ProcessingResult.IGNORED

        if account.held - original.amount < 0:
            logger.info(f"Resolve for tx {original.transaction_id}: held {account.held} cannot cover {original.amount}")
            return ProcessingResult.IGNORED

        account.release_hold(original.amount)
        self._state.set_dispute_state(original.transaction_id, DisputeState.RESOLVED)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._lookup_original(transaction)
        if original is None or not self._is_open_dispute(original):
            return ProcessingResult.IGNORED

        if account.held - original.amount < 0:
            logger.info(f"Chargeback for tx {original.transaction_id}: held {account.held} cannot cover {original.amount}")
            return ProcessingResult.IGNORED

        account.remove_held(original.amount)
        account.locked = True
        self._state.set_dispute_state(original.transaction_id, DisputeState.CHARGED_BACK)
        logger.info(f"Chargeback for tx {original.transaction_id}: account {account.client_id} locked")
        return ProcessingResult.APPLIED

    def _store(self, transaction: Transaction) -> bool:
        if self._state.store_transaction(transaction):
            return True
        logger.warning(f"{transaction}: tx id {transaction.transaction_id} already used, skipping")
        return False

    def _lookup_original(self, transaction: Transaction) -> Optional[Transaction]:
        """Find the deposit/withdrawal a dispute, resolve or chargeback refers to."""
        original = self._state.get_transaction(transaction.transaction_id)
        kind = transaction.transaction_type.value.capitalize()

        if original is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: transaction not found")
            return None

        if original.amount is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: original has no amount")
            return None

        if self._strict_disputes and original.client_id != transaction.client_id:
            logger.info(
                f"{kind} for tx {transaction.transaction_id}: client mismatch "
                f"(expected {original.client_id}, got {transaction.client_id})"
            )
            return None

        return original

    def _is_open_dispute(self, original: Transaction) -> bool:
        if not self._strict_disputes:
            return True
        if self._state.get_dispute_state(original.transaction_id) != DisputeState.DISPUTED:
            logger.info(f"Tx {original.transaction_id} is not under dispute")
            return False
        return True
