import csv
import logging
import sys
from typing import List, Optional

from csv_io import write_accounts
from engine import PaymentsEngine
from errors import AmountOverflowError, InputFormatError

LOG_FILENAME = "transaction-processor-logs.log"
LOG_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(log_filename: Optional[str] = LOG_FILENAME) -> None:
    """Warnings go to stderr; the full INFO log goes to a file in the working directory."""
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers: List[logging.Handler] = [stderr_handler]

    if log_filename:
        file_handler = logging.FileHandler(log_filename)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s " + LOG_FORMAT))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for handler in handlers:
        root.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: payments <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    try:
        configure_logging(LOG_FILENAME)
    except OSError as e:
        print(f"Failed to open log file {LOG_FILENAME}: {e}", file=sys.stderr)
        return 1

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Failed to read input {filepath}: {e}", file=sys.stderr)
        return 1
    except (InputFormatError, AmountOverflowError, csv.Error, UnicodeDecodeError) as e:
        print(f"Failed to process input {filepath}: {e}", file=sys.stderr)
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
