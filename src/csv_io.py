import csv
import logging
from typing import Dict, Iterator, List, Mapping, Optional, TextIO

from amount import Amount
from errors import InputFormatError, ParseError
from models import AccountSnapshot, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_INPUT_COLUMNS = ("type", "client", "tx")
OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")


def _parse_id(value: Optional[str], name: str) -> int:
    # ASCII digits only: int() would also take signs, underscores and non-ASCII digits
    if not value or not value.isascii() or not value.isdigit():
        raise ParseError(f"{name} {value!r} is not a non-negative integer")
    return int(value)


def parse_row(row: Mapping[str, Optional[str]]) -> Transaction:
    """Parse one normalized CSV row into a Transaction, raising ParseError if malformed."""
    type_str = (row.get("type") or "").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise ParseError(f"Unknown transaction type {type_str!r}") from None

    client_id = _parse_id(row.get("client"), "client")
    transaction_id = _parse_id(row.get("tx"), "tx")

    amount = None
    amount_str = row.get("amount") or ""
    if transaction_type.carries_amount:
        if not amount_str:
            raise ParseError(f"{transaction_type.value} tx {transaction_id} is missing an amount")
        amount = Amount.from_decimal_text(amount_str)
    elif amount_str:
        raise ParseError(f"{transaction_type.value} tx {transaction_id} must not carry an amount")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


class TransactionReader:
    """
    Lazily reads transactions from CSV text, one row at a time.
    Malformed rows are logged and skipped; a missing header is fatal.
    The reader is single-pass: iterating it a second time yields nothing.
    """

    def __init__(self, stream: TextIO):
        self._rows = csv.reader(stream)
        self._header: Optional[List[str]] = None
        self.skipped_rows = 0

    def _read_header(self) -> List[str]:
        try:
            raw = next(self._rows)
        except StopIteration:
            raise InputFormatError("Input is empty, expected a header row") from None

        header = [name.strip().lower() for name in raw]
        missing = [name for name in REQUIRED_INPUT_COLUMNS if name not in header]
        if missing:
            raise InputFormatError(f"Input header {raw} is missing columns: {', '.join(missing)}")
        return header

    def __iter__(self) -> Iterator[Transaction]:
        if self._header is None:
            self._header = self._read_header()

        for values in self._rows:
            if not any(value.strip() for value in values):
                continue

            row: Dict[str, str] = {
                name: value.strip() for name, value in zip(self._header, values)
            }
            try:
                yield parse_row(row)
            except ParseError as e:
                self.skipped_rows += 1
                logger.warning(f"Failed to parse row {values} (line {self._rows.line_num}): {e}")


def write_accounts(accounts: Mapping[int, AccountSnapshot], stream: TextIO) -> None:
    """Write the account snapshot as CSV, one row per client in mapping order."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for client_id, account in accounts.items():
        writer.writerow([
            client_id,
            account.available.to_decimal_text(),
            account.held.to_decimal_text(),
            account.total.to_decimal_text(),
            str(account.locked).lower(),
        ])
