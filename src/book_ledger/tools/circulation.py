"""
Circulation tools for the Book Ledger MCP surface.

These handlers are the operations with side effects:
1. add_book: register a new title with its number of copies
2. delete_book: remove a title from the catalog
3. lend_book: take one copy out
4. return_book: bring one copy back

Each handler validates its raw arguments with a Pydantic input schema,
calls the ledger, and turns the ``LedgerResult`` into an MCP content dict.
Business failures are not exceptions here: the result's ``ErrorKind`` is
passed through as ``errorKind`` so clients can tell "no such book" from
"all copies are out" without parsing the message.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from ..ledger import LedgerError, get_ledger
from ..ledger.errors import ErrorKind
from ..models.book import Book

logger = logging.getLogger(__name__)


class BookIdInput(BaseModel):
    """Input schema for tools that act on a single book."""

    book_id: int = Field(
        ...,
        description="Identifier of the book",
        ge=1,
        examples=[1, 42],
    )


class AddBookInput(BaseModel):
    """Input schema for the add_book tool."""

    title: str = Field(..., description="Title of the book", examples=["Dune"])
    author: str = Field(..., description="Author of the book", examples=["Frank Herbert"])
    copies: int = Field(..., description="Total copies owned", examples=[3])
    available_copies: int | None = Field(
        default=None,
        description="Copies currently lendable; defaults to copies",
        examples=[3],
    )


def _error_response(error: LedgerError) -> dict[str, Any]:
    return {
        "isError": True,
        "errorKind": error.kind.value,
        "content": [{"type": "text", "text": error.message}],
    }


def _invalid_arguments(tool: str, exc: Exception) -> dict[str, Any]:
    logger.warning("Invalid %s parameters: %s", tool, exc)
    return {
        "isError": True,
        "errorKind": ErrorKind.VALIDATION.value,
        "content": [{"type": "text", "text": f"Invalid {tool} parameters: {exc}"}],
    }


def _book_response(message: str, book: Book) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": message}],
        "data": {"book": book.model_dump()},
    }


async def add_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the add_book tool."""
    try:
        params = AddBookInput.model_validate(arguments)
    except ValueError as e:
        return _invalid_arguments("add_book", e)

    result = get_ledger().add(params.model_dump(exclude_none=True))
    if not result.ok:
        return _error_response(result.error)

    book = result.value
    return _book_response(
        f"Added '{book.title}' by {book.author} as book {book.id} "
        f"({book.available_copies} of {book.copies} copies available).",
        book,
    )


async def delete_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the delete_book tool."""
    try:
        params = BookIdInput.model_validate(arguments)
    except ValueError as e:
        return _invalid_arguments("delete_book", e)

    result = get_ledger().delete(params.book_id)
    if not result.ok:
        return _error_response(result.error)

    return {
        "content": [{"type": "text", "text": f"Deleted book {result.value}."}],
        "data": {"deleted_id": result.value},
    }


async def lend_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the lend_book tool.

    A book with no available copies yields ``errorKind`` "no_copies_available";
    an unknown id yields "not_found".
    """
    try:
        params = BookIdInput.model_validate(arguments)
    except ValueError as e:
        return _invalid_arguments("lend_book", e)

    result = get_ledger().lend(params.book_id)
    if not result.ok:
        return _error_response(result.error)

    book = result.value
    return _book_response(
        f"Lent a copy of '{book.title}'. "
        f"{book.available_copies} of {book.copies} copies still available.",
        book,
    )


async def return_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the return_book tool."""
    try:
        params = BookIdInput.model_validate(arguments)
    except ValueError as e:
        return _invalid_arguments("return_book", e)

    result = get_ledger().return_(params.book_id)
    if not result.ok:
        return _error_response(result.error)

    book = result.value
    return _book_response(
        f"Returned a copy of '{book.title}'. "
        f"{book.available_copies} of {book.copies} copies available.",
        book,
    )
