import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Set

from amount import Amount
from errors import ClientMismatch, DuplicateTransactionId, InvalidStateTransition, UnknownTransaction

logger = logging.getLogger(__name__)


class DisputeState(Enum):
    CLEAN = "clean"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


@dataclass
class LedgerEntry:
    transaction_id: int
    client_id: int
    amount: Amount
    state: DisputeState = DisputeState.CLEAN


class Ledger:
    """
    Record of dispute-eligible transactions (deposits) and their dispute state.

    Lifecycle of an entry is CLEAN -> DISPUTED -> RESOLVED | CHARGED_BACK and
    never goes back. Withdrawal ids are remembered only to keep transaction
    ids unique; withdrawals cannot be disputed.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}
        self._withdrawal_ids: Set[int] = set()

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries or transaction_id in self._withdrawal_ids

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve the deposit entry for a transaction id."""
        return self._entries.get(transaction_id)

    def check_new(self, transaction_id: int) -> None:
        """Raise DuplicateTransactionId if the id was already used by a deposit or withdrawal."""
        if transaction_id in self:
            raise DuplicateTransactionId(
                f"Transaction {transaction_id} was already processed", transaction_id=transaction_id
            )

    def record_deposit(self, transaction_id: int, client_id: int, amount: Amount) -> LedgerEntry:
        self.check_new(transaction_id)
        entry = LedgerEntry(transaction_id, client_id, amount)
        self._entries[transaction_id] = entry
        return entry

    def record_withdrawal(self, transaction_id: int) -> None:
        self.check_new(transaction_id)
        self._withdrawal_ids.add(transaction_id)

    def dispute(self, transaction_id: int, client_id: int) -> Amount:
        """Move a CLEAN deposit to DISPUTED and return the amount to hold."""
        entry = self._entry_for(transaction_id, client_id, DisputeState.CLEAN)
        entry.state = DisputeState.DISPUTED
        return entry.amount

    def resolve(self, transaction_id: int, client_id: int) -> Amount:
        """Move a DISPUTED deposit to RESOLVED and return the amount to release."""
        entry = self._entry_for(transaction_id, client_id, DisputeState.DISPUTED)
        entry.state = DisputeState.RESOLVED
        return entry.amount

    def chargeback(self, transaction_id: int, client_id: int) -> Amount:
        """Move a DISPUTED deposit to CHARGED_BACK and return the amount to reverse."""
        entry = self._entry_for(transaction_id, client_id, DisputeState.DISPUTED)
        entry.state = DisputeState.CHARGED_BACK
        return entry.amount

    def validate(self, transaction_id: int, client_id: int, expected: DisputeState) -> LedgerEntry:
        """Run every check of a dispute operation without changing the entry."""
        return self._entry_for(transaction_id, client_id, expected)

    def _entry_for(self, transaction_id: int, client_id: int, expected: DisputeState) -> LedgerEntry:
        entry = self._entries.get(transaction_id)

        if entry is None:
            if transaction_id in self._withdrawal_ids:
                logger.info(f"Transaction {transaction_id} is a withdrawal, only deposits can be disputed")
            raise UnknownTransaction(
                f"No disputable transaction {transaction_id}", client_id=client_id, transaction_id=transaction_id
            )

        if entry.client_id != client_id:
            raise ClientMismatch(
                f"Transaction {transaction_id} belongs to client {entry.client_id}, not {client_id}",
                client_id=client_id,
                transaction_id=transaction_id,
            )

        if entry.state != expected:
            raise InvalidStateTransition(
                f"Transaction {transaction_id} is {entry.state.value}, expected {expected.value}",
                client_id=client_id,
                transaction_id=transaction_id,
            )

        return entry
