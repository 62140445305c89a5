"""Book Resources - Catalog Access

Exposes ledger records via read-only resources.

Resources:
- library://books/list - Every book with its copy counters
- library://books/{book_id} - One book by id
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..database.backend import StorageError
from ..ledger import get_ledger
from ..models.book import Book

logger = logging.getLogger(__name__)


class BookListResponse(BaseModel):
    """Response schema for the catalog listing."""

    books: list[Book] = Field(..., description="Every book in the catalog, ordered by id")
    total: int = Field(..., description="Number of books in the catalog")
    available_titles: int = Field(..., description="Books with at least one copy available")


async def list_books_handler() -> dict[str, Any]:
    """Returns the whole catalog."""
    try:
        books = get_ledger().list_all()
    except StorageError as e:
        logger.exception("Error in books/list resource")
        raise ResourceError(f"Failed to retrieve book list: {e!s}") from e

    logger.debug("Resource request - books/list: %d books", len(books))
    response = BookListResponse(
        books=books,
        total=len(books),
        available_titles=sum(1 for book in books if book.is_available),
    )
    return response.model_dump()


async def get_book_handler(book_id: str) -> dict[str, Any]:
    """Returns details for one book, including its copy counters."""
    try:
        numeric_id = int(book_id)
    except ValueError as e:
        raise ResourceError(f"Invalid book id: {book_id}") from e

    try:
        book = get_ledger().get_by_id(numeric_id)
    except StorageError as e:
        logger.exception("Error in books/{book_id} resource")
        raise ResourceError(f"Failed to retrieve book details: {e!s}") from e

    if book is None:
        raise ResourceError(f"Book not found: {book_id}")

    return book.model_dump()


book_resources: list[dict[str, Any]] = [
    {
        "uri": "library://books/list",
        "name": "Book Catalog",
        "description": "Every book in the ledger with its total and available copies",
        "mime_type": "application/json",
        "handler": list_books_handler,
    },
    {
        "uri": "library://books/{book_id}",
        "name": "Book Details",
        "description": "One book by id, including total and available copies",
        "mime_type": "application/json",
        "handler": get_book_handler,
    },
]
