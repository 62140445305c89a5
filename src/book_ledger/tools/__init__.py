"""
Book Ledger MCP tools - operations with side effects on the catalog.
"""

from .circulation import (
    add_book_handler,
    delete_book_handler,
    lend_book_handler,
    return_book_handler,
)

__all__ = [
    "add_book_handler",
    "delete_book_handler",
    "lend_book_handler",
    "return_book_handler",
]
