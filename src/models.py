from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from amount import Amount
from errors import AccountLocked, InsufficientFunds, ProcessingResult


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Amount] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Amount
    held: Amount
    locked: bool

    @property
    def total(self) -> Amount:
        return self.available + self.held


@dataclass
class ClientAccount:
    """
    Balance state of one client. Every operation either succeeds or raises
    a ProcessingError before touching any field.
    """

    client_id: int
    available: Amount = Amount.ZERO
    held: Amount = Amount.ZERO
    locked: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def ensure_unlocked(self) -> None:
        if self.locked:
            raise AccountLocked(f"Account {self.client_id} is locked", client_id=self.client_id)

    def deposit(self, amount: Amount) -> None:
        self.ensure_unlocked()
        self.available = self.available + amount

    def withdraw(self, amount: Amount) -> None:
        self.ensure_unlocked()
        if self.available < amount:
            raise InsufficientFunds(
                f"Account {self.client_id} has {self.available} available, cannot withdraw {amount}",
                client_id=self.client_id,
            )
        self.available = self.available - amount

    def hold(self, amount: Amount) -> None:
        # available may go negative when withdrawals followed the disputed deposit
        self.ensure_unlocked()
        available, held = self.available - amount, self.held + amount
        self.available, self.held = available, held

    def release(self, amount: Amount) -> None:
        self.ensure_unlocked()
        available, held = self.available + amount, self.held - amount
        self.available, self.held = available, held

    def chargeback(self, amount: Amount) -> None:
        self.ensure_unlocked()
        self.held = self.held - amount
        self.locked = True

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(self.client_id, self.available, self.held, self.locked)


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.skipped_rows = 0
        self.failures_by_result: Counter = Counter()

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.SUCCESS:
            self.processed += 1
        else:
            self.failed += 1
            self.failures_by_result[result] += 1

    def __str__(self) -> str:
        return f"Processed: {self.processed}, Failed: {self.failed}, Skipped rows: {self.skipped_rows}"
