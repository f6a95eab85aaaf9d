from enum import Enum
from typing import Optional


class ProcessingResult(Enum):
    SUCCESS = "success"
    INVALID_AMOUNT = "invalid_amount"
    UNKNOWN_CLIENT = "unknown_client"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    DUPLICATE_TRANSACTION_ID = "duplicate_transaction_id"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_LOCKED = "account_locked"
    INVALID_STATE_TRANSITION = "invalid_state_transition"


class ParseError(ValueError):
    """A single input row or amount could not be turned into a typed record."""


class InputFormatError(Exception):
    """The input stream as a whole is unusable (e.g. missing header columns)."""


class AmountOverflowError(OverflowError):
    """Arithmetic left the supported 64-bit range. Never clamped, always fatal."""


class ProcessingError(Exception):
    """
    A record was rejected by the engine. Rejection never mutates state.
    Each subclass maps to the ProcessingResult reported to the caller.
    """

    result: ProcessingResult

    def __init__(self, message: str, client_id: Optional[int] = None, transaction_id: Optional[int] = None):
        super().__init__(message)
        self.client_id = client_id
        self.transaction_id = transaction_id


class InvalidAmount(ProcessingError):
    result = ProcessingResult.INVALID_AMOUNT


class UnknownClient(ProcessingError):
    result = ProcessingResult.UNKNOWN_CLIENT


class UnknownTransaction(ProcessingError):
    result = ProcessingResult.UNKNOWN_TRANSACTION


class ClientMismatch(ProcessingError):
    result = ProcessingResult.CLIENT_MISMATCH


class DuplicateTransactionId(ProcessingError):
    result = ProcessingResult.DUPLICATE_TRANSACTION_ID


class InsufficientFunds(ProcessingError):
    result = ProcessingResult.INSUFFICIENT_FUNDS


class AccountLocked(ProcessingError):
    result = ProcessingResult.ACCOUNT_LOCKED


class InvalidStateTransition(ProcessingError):
    result = ProcessingResult.INVALID_STATE_TRANSITION
