import dataclasses
from typing import Dict, Optional

from models import Transaction, ClientAccount, DisputeState


class StateManager:
    """
    In-memory state for one processing run.
    Stores client accounts, transaction history for dispute lookups and
    the dispute state of each stored transaction.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}
        self._dispute_states: Dict[int, DisputeState] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return a copy of the account, or None if the client was never seen."""
        account = self._accounts.get(client_id)
        if account is None:
            return None
        return dataclasses.replace(account)

    def store_transaction(self, transaction: Transaction) -> bool:
        """
        Store transaction for future dispute lookups.
        Returns False if the id is already taken; stored records are never replaced.
        """
        if transaction.transaction_id in self._transactions:
            return False
        self._transactions[transaction.transaction_id] = transaction
        return True

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_dispute_state(self, transaction_id: int) -> DisputeState:
        return self._dispute_states.get(transaction_id, DisputeState.NONE)

    def set_dispute_state(self, transaction_id: int, dispute_state: DisputeState) -> None:
        self._dispute_states[transaction_id] = dispute_state

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return copies of all accounts (for final output)."""
        return {client_id: dataclasses.replace(account) for client_id, account in self._accounts.items()}
