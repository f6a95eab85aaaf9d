from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ledger import Ledger
from models import AccountSnapshot, ClientAccount


class StateManager:
    """
    State owned by a single run: client accounts and the ledger of deposits
    used for dispute lookups. Construct one per run and hand it to the processor.
    """

    def __init__(self):
        # dicts keep insertion order, so accounts iterate in first-seen order
        self._accounts: Dict[int, ClientAccount] = {}
        self.ledger = Ledger()

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def __len__(self) -> int:
        return len(self._accounts)

    def snapshot(self) -> Mapping[int, AccountSnapshot]:
        """Return a read-only view of all accounts (for final output), in first-seen client order."""
        return MappingProxyType({client_id: account.snapshot() for client_id, account in self._accounts.items()})
