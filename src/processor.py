import logging

from errors import InvalidAmount, ProcessingError, UnknownClient
from ledger import DisputeState
from models import Transaction, TransactionType, ClientAccount, ProcessingResult
from state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Processes transactions against state, one at a time.
    Every check runs before any mutation, so a rejected transaction leaves
    the state untouched. Rejections are returned, never raised; overflow is fatal and propagates.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Processed successfully
            anything else: the reason the transaction was rejected
        """
        try:
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    self._handle_chargeback(transaction)
        except ProcessingError as e:
            logger.info(f"Rejected {transaction}: {e}")
            return e.result

        return ProcessingResult.SUCCESS

    apply = process_transaction

    def _require_positive_amount(self, transaction: Transaction) -> None:
        if transaction.amount is None or not transaction.amount.is_positive():
            raise InvalidAmount(
                f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: invalid amount {transaction.amount}",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

    def _handle_deposit(self, transaction: Transaction) -> None:
        self._require_positive_amount(transaction)
        self._state.ledger.check_new(transaction.transaction_id)

        account = self._state.get_or_create_account(transaction.client_id)
        account.deposit(transaction.amount)
        self._state.ledger.record_deposit(transaction.transaction_id, transaction.client_id, transaction.amount)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        self._require_positive_amount(transaction)

        account = self._state.get_account(transaction.client_id)
        if account is None:
            raise UnknownClient(
                f"Withdrawal tx {transaction.transaction_id}: client {transaction.client_id} has no account",
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
            )

        self._state.ledger.check_new(transaction.transaction_id)
        account.withdraw(transaction.amount)
        self._state.ledger.record_withdrawal(transaction.transaction_id)

    def _handle_dispute(self, transaction: Transaction) -> None:
        account = self._checked_account(transaction, DisputeState.CLEAN)
        amount = self._state.ledger.dispute(transaction.transaction_id, transaction.client_id)
        account.hold(amount)

    def _handle_resolve(self, transaction: Transaction) -> None:
        account = self._checked_account(transaction, DisputeState.DISPUTED)
        amount = self._state.ledger.resolve(transaction.transaction_id, transaction.client_id)
        account.release(amount)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        account = self._checked_account(transaction, DisputeState.DISPUTED)
        amount = self._state.ledger.chargeback(transaction.transaction_id, transaction.client_id)
        account.chargeback(amount)
        logger.warning(f"Chargeback on tx {transaction.transaction_id}: account {transaction.client_id} is now locked")

    def _checked_account(self, transaction: Transaction, expected: DisputeState) -> ClientAccount:
        """Run the ledger and lock checks shared by dispute, resolve and chargeback."""
        self._state.ledger.validate(transaction.transaction_id, transaction.client_id, expected)
        # the ledger entry belongs to this client, so its deposit created the account
        account = self._state.get_or_create_account(transaction.client_id)
        account.ensure_unlocked()
        return account
