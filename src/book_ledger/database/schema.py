"""
SQLAlchemy database schema for the Book Ledger.

The ``books`` table mirrors the ``Book`` Pydantic model. The ``version``
column backs the optimistic compare-and-set used for lend/return/update:
an UPDATE only applies when the caller still holds the current version.
"""

from sqlalchemy import CheckConstraint, Column, Index, Integer, String
from sqlalchemy.orm import declarative_base

# Base class for all SQLAlchemy models
Base = declarative_base()


class Book(Base):
    """
    Books table - stores the lendable catalog.

    The database enforces the lower bounds of the copy counters; the upper
    bound (available <= copies) is checked by the ledger so that the
    unbounded-return contract can be kept when the hardening switch is off.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    copies = Column(Integer, nullable=False)
    available_copies = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_book_title", "title"),
        Index("idx_book_author", "author"),
        CheckConstraint("copies >= 0", name="check_copies_non_negative"),
        CheckConstraint("available_copies >= 0", name="check_available_copies_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Book id={self.id} title={self.title!r} "
            f"available={self.available_copies}/{self.copies} v{self.version}>"
        )
