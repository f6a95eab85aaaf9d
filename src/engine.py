import logging
import sys
from typing import Iterable, Mapping, Optional

from csv_io import TransactionReader
from models import AccountSnapshot, ProcessingResult, ProcessingStats, Transaction
from processor import TransactionProcessor
from state import StateManager

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Drives one run: feeds transactions to the processor strictly in input
    order and skips the ones it rejects. Each engine owns fresh state.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()
        self._processor = TransactionProcessor(self._state)
        self.stats = ProcessingStats()

    def process_transactions(self, transactions: Iterable[Transaction]) -> Mapping[int, AccountSnapshot]:
        """Apply every transaction in order and return the final account states."""
        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self.stats.record(result)
            if result != ProcessingResult.SUCCESS:
                logger.debug(f"Skipping {transaction}: {result.value}")

        return self._state.snapshot()

    def process_file(self, filepath: str) -> Mapping[int, AccountSnapshot]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")

        with open(filepath, "r", newline="") as f:
            reader = TransactionReader(f)
            accounts = self.process_transactions(reader)
            self.stats.skipped_rows = reader.skipped_rows

        logger.info(f"Finished {filepath}: {self.stats}")
        if self.stats.failures_by_result:
            for result, count in self.stats.failures_by_result.most_common():
                logger.info(f"  {result.value}: {count}")

        # Print final processing report to stderr
        print(self.stats, file=sys.stderr)

        return accounts
