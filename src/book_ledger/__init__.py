"""
Book Ledger.

Manages a catalog of lendable book records with strict accounting of
available versus total copies, safe under concurrent lend/return calls.

Key Components:
- models: Pydantic models for book records and inputs
- database: storage backends (SQLAlchemy, in-memory) and session management
- ledger: the BookLedger, its tagged results and error taxonomy
- config: configuration management with pydantic-settings
- tools / resources / server: thin MCP surface over the ledger
"""

__version__ = "0.1.0"

from .ledger import BookLedger, ErrorKind, LedgerResult, NotFoundError, ValidationError

__all__ = [
    "BookLedger",
    "ErrorKind",
    "LedgerResult",
    "NotFoundError",
    "ValidationError",
    "__version__",
]
