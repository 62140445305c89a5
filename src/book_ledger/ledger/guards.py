"""Validation guards shared by the ledger's add and update paths."""

from collections.abc import Collection

from ..models.book import Book


def book_rule_violations(book: Book, fields: Collection[str] | None = None) -> list[str]:
    """
    Check a candidate record against the ledger's field rules.

    Args:
        book: The candidate record
        fields: Only check rules involving these fields (all rules when None).
            The copies bound involves both ``copies`` and ``available_copies``.

    Returns:
        Human-readable violations; empty when the record is acceptable
    """

    def touched(*names: str) -> bool:
        return fields is None or any(name in fields for name in names)

    problems = []
    if touched("title") and not book.title.strip():
        problems.append("title must not be empty")
    if touched("author") and not book.author.strip():
        problems.append("author must not be empty")
    if touched("copies") and book.copies < 0:
        problems.append(f"copies must be >= 0 (got {book.copies})")
    if touched("available_copies") and book.available_copies < 0:
        problems.append(f"available_copies must be >= 0 (got {book.available_copies})")
    elif (
        touched("copies", "available_copies")
        and book.copies >= 0
        and book.available_copies > book.copies
    ):
        problems.append(
            f"available_copies ({book.available_copies}) cannot exceed copies ({book.copies})"
        )
    return problems


def can_lend(book: Book) -> bool:
    return book.available_copies > 0


def can_return(book: Book, enforce_bound: bool) -> bool:
    # Without the bound, returns are unconditional.
    return not enforce_bound or book.available_copies < book.copies
