"""
Property-based tests for the invariants of the transaction engine.

Random streams of deposits, withdrawals and dispute operations over a small
pool of clients and transaction ids, checked after every single record:
- total == available + held
- a locked account never changes again
- a dispute on a transaction that already left CLEAN is always rejected
- without disputes, available == accepted deposits - accepted withdrawals
"""

import sys
import os
from decimal import Decimal, ROUND_HALF_UP

from hypothesis import given, settings
from hypothesis import strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from ledger import DisputeState
from models import Transaction, TransactionType, ProcessingResult
from processor import TransactionProcessor
from state import StateManager

clients = st.integers(min_value=1, max_value=3)
transaction_ids = st.integers(min_value=1, max_value=12)
amounts = st.integers(min_value=-5_0000, max_value=100_0000).map(Amount)


def money_transactions(types):
    return st.builds(
        Transaction,
        transaction_type=st.sampled_from(types),
        client_id=clients,
        transaction_id=transaction_ids,
        amount=amounts,
    )


reference_transactions = st.builds(
    Transaction,
    transaction_type=st.sampled_from([TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK]),
    client_id=clients,
    transaction_id=transaction_ids,
)

any_transaction = st.one_of(
    money_transactions([TransactionType.DEPOSIT, TransactionType.WITHDRAWAL]),
    reference_transactions,
)


def account_state(state, client_id):
    account = state.get_account(client_id)
    if account is None:
        return None
    return account.available, account.held, account.locked


def client_id_locked(state, client_id):
    account = state.get_account(client_id)
    return account is not None and account.locked


class TestInvariants:
    @given(st.lists(any_transaction, max_size=60))
    @settings(max_examples=200)
    def test_total_is_available_plus_held(self, transactions):
        state = StateManager()
        processor = TransactionProcessor(state)

        for transaction in transactions:
            processor.process_transaction(transaction)
            for account in state.snapshot().values():
                assert account.total == account.available + account.held
                assert not account.held.is_negative()

    @given(st.lists(any_transaction, max_size=60))
    @settings(max_examples=200)
    def test_locked_account_never_changes(self, transactions):
        state = StateManager()
        processor = TransactionProcessor(state)
        frozen = {}

        for transaction in transactions:
            result = processor.process_transaction(transaction)
            for client_id, snapshot in frozen.items():
                assert account_state(state, client_id) == snapshot
            if client_id_locked(state, transaction.client_id) and transaction.client_id not in frozen:
                assert result == ProcessingResult.SUCCESS
                frozen[transaction.client_id] = account_state(state, transaction.client_id)

    @given(st.lists(any_transaction, max_size=60))
    @settings(max_examples=200)
    def test_rejected_records_do_not_mutate(self, transactions):
        state = StateManager()
        processor = TransactionProcessor(state)

        for transaction in transactions:
            before = {client_id: (a.available, a.held, a.locked) for client_id, a in state.snapshot().items()}
            ledger_size = len(state.ledger)

            result = processor.process_transaction(transaction)

            if result != ProcessingResult.SUCCESS:
                after = {client_id: (a.available, a.held, a.locked) for client_id, a in state.snapshot().items()}
                assert after == before
                assert len(state.ledger) == ledger_size

    @given(st.lists(any_transaction, max_size=60))
    @settings(max_examples=200)
    def test_dispute_replay_is_rejected(self, transactions):
        state = StateManager()
        processor = TransactionProcessor(state)

        for transaction in transactions:
            processor.process_transaction(transaction)

        for transaction_id in range(1, 13):
            entry = state.ledger.get(transaction_id)
            if entry is None or entry.state == DisputeState.CLEAN:
                continue
            before = account_state(state, entry.client_id)
            replay = Transaction(TransactionType.DISPUTE, client_id=entry.client_id, transaction_id=transaction_id)

            assert processor.process_transaction(replay) != ProcessingResult.SUCCESS
            assert account_state(state, entry.client_id) == before

    @given(st.lists(money_transactions([TransactionType.DEPOSIT, TransactionType.WITHDRAWAL]), max_size=60))
    @settings(max_examples=200)
    def test_conservation_without_disputes(self, transactions):
        state = StateManager()
        processor = TransactionProcessor(state)
        expected = {}

        for transaction in transactions:
            if processor.process_transaction(transaction) != ProcessingResult.SUCCESS:
                continue
            balance = expected.get(transaction.client_id, Amount.ZERO)
            if transaction.transaction_type == TransactionType.DEPOSIT:
                expected[transaction.client_id] = balance + transaction.amount
            else:
                expected[transaction.client_id] = balance - transaction.amount

        accounts = state.snapshot()
        assert set(accounts) == set(expected)
        for client_id, available in expected.items():
            assert accounts[client_id].available == available
            assert accounts[client_id].held == Amount.ZERO
            assert not available.is_negative()


class TestRounding:
    @given(st.decimals(min_value=-10**9, max_value=10**9, allow_nan=False, allow_infinity=False, places=6))
    @settings(max_examples=200)
    def test_text_round_trip_is_rounded_to_four_digits(self, value):
        amount = Amount.from_decimal_text(str(value))
        expected = value.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
        if expected == 0:
            expected = abs(expected)
        assert amount.to_decimal_text() == f"{expected:.4f}"

    def test_half_rounds_away_from_zero(self):
        assert Amount.from_decimal_text("1.23455").to_decimal_text() == "1.2346"
        assert Amount.from_decimal_text("-1.23455").to_decimal_text() == "-1.2346"
