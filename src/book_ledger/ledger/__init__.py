"""
The Book Ledger core.

- BookLedger: atomic CRUD and lend/return transitions (book_ledger.py)
- LedgerResult / LedgerError / ErrorKind: tagged results (errors.py)
- Exception taxonomy raised by ``LedgerResult.unwrap()`` (errors.py)
"""

from .book_ledger import BookLedger, create_ledger, get_ledger, reset_ledger
from .errors import (
    AllCopiesReturnedError,
    ConcurrencyError,
    ErrorKind,
    LedgerError,
    LedgerException,
    LedgerResult,
    NoCopiesAvailableError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AllCopiesReturnedError",
    "BookLedger",
    "ConcurrencyError",
    "ErrorKind",
    "LedgerError",
    "LedgerException",
    "LedgerResult",
    "NoCopiesAvailableError",
    "NotFoundError",
    "ValidationError",
    "create_ledger",
    "get_ledger",
    "reset_ledger",
]
