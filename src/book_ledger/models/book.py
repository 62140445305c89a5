"""
Book models for the Book Ledger.

A Book is the only entity the ledger manages. Its copy counters are the
heart of the lending logic:

- ``copies`` is the number of copies the library owns
- ``available_copies`` is how many of them can be lent right now

The ledger keeps ``0 <= available_copies`` at all times and checks
``available_copies <= copies`` on create and update. ``version`` is the
optimistic-concurrency token the storage backend bumps on every successful
update; a writer holding an old version loses the compare-and-set and retries.

The input models (``BookCreate``, ``BookUpdate``) carry types only. Business
rules such as "copies must not be negative" are enforced by the ledger's
guards so that they surface as ledger results rather than as construction
errors.
"""

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """A stored book record."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "The Left Hand of Darkness",
                "author": "Ursula K. Le Guin",
                "copies": 3,
                "available_copies": 2,
                "version": 4,
            }
        },
    )

    id: int | None = Field(
        default=None,
        description="Identifier assigned by the store on insert",
        examples=[1, 42],
    )

    title: str = Field(
        ...,
        description="The title of the book",
        examples=["The Left Hand of Darkness", "Dune"],
    )

    author: str = Field(
        ...,
        description="The author of the book",
        examples=["Ursula K. Le Guin", "Frank Herbert"],
    )

    copies: int = Field(
        ...,
        description="Total number of copies owned by the library",
        examples=[0, 3, 10],
    )

    available_copies: int = Field(
        ...,
        description="Number of copies currently available for lending",
        examples=[0, 2, 10],
    )

    version: int = Field(
        default=0,
        description="Optimistic-concurrency token, bumped on every update",
        ge=0,
    )

    @property
    def is_available(self) -> bool:
        """Check if the book has any available copies."""
        return self.available_copies > 0

    @property
    def lent_copies(self) -> int:
        """Number of copies currently out on loan."""
        return self.copies - self.available_copies


class BookCreate(BaseModel):
    """Input for adding a book. ``available_copies`` defaults to ``copies``."""

    title: str
    author: str
    copies: int
    available_copies: int | None = None


class BookUpdate(BaseModel):
    """Input for editing a book - only explicitly set fields are applied."""

    title: str | None = None
    author: str | None = None
    copies: int | None = None
    available_copies: int | None = None
