"""
Book Ledger models.

Pydantic models for the single entity the ledger manages:

- Book: a stored record with its copy counters and version token
- BookCreate: input for adding a book
- BookUpdate: partial input for the update path
"""

from .book import Book, BookCreate, BookUpdate

__all__ = [
    "Book",
    "BookCreate",
    "BookUpdate",
]
