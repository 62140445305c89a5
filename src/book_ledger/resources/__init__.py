"""
Book Ledger MCP resources - read-only views of the catalog.
"""

from .books import book_resources, get_book_handler, list_books_handler

__all__ = [
    "book_resources",
    "get_book_handler",
    "list_books_handler",
]
