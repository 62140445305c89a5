"""
SQLAlchemy storage backend for the Book Ledger.

Each call runs in its own short transaction from
``DatabaseManager.session_scope``. The compare-and-set in ``update`` is a
single statement::

    UPDATE books SET ..., version = version + 1
    WHERE id = :id AND version = :expected_version

so the database itself decides which of two racing writers wins. A zero row
count means either the record is gone (``None``) or someone else updated it
first (``StaleRecordError``).
"""

import logging

from sqlalchemy import delete, select, update

from ..models.book import Book as BookModel
from .backend import StaleRecordError, StorageBackend
from .schema import Book as BookDB
from .session import DatabaseManager

logger = logging.getLogger(__name__)


class SQLAlchemyBackend(StorageBackend):
    """Durable Book store on top of any SQLAlchemy-supported database."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @staticmethod
    def _to_model(row: BookDB) -> BookModel:
        return BookModel.model_validate(row, from_attributes=True)

    def insert(self, record: BookModel) -> int:
        row = BookDB(
            title=record.title,
            author=record.author,
            copies=record.copies,
            available_copies=record.available_copies,
            version=0,
        )
        with self.db_manager.session_scope() as session:
            session.add(row)
            session.flush()
            book_id = row.id

        logger.debug("Inserted book %s", book_id)
        return book_id

    def fetch(self, book_id: int) -> BookModel | None:
        with self.db_manager.session_scope() as session:
            row = session.get(BookDB, book_id)
            return self._to_model(row) if row is not None else None

    def fetch_all(self) -> list[BookModel]:
        query = select(BookDB).order_by(BookDB.id)
        with self.db_manager.session_scope() as session:
            return [self._to_model(row) for row in session.execute(query).scalars().all()]

    def update(self, book_id: int, record: BookModel) -> BookModel | None:
        stmt = (
            update(BookDB)
            .where(BookDB.id == book_id, BookDB.version == record.version)
            .values(
                title=record.title,
                author=record.author,
                copies=record.copies,
                available_copies=record.available_copies,
                version=BookDB.version + 1,
            )
            .execution_options(synchronize_session=False)
        )

        with self.db_manager.session_scope() as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                if session.get(BookDB, book_id) is None:
                    return None
                raise StaleRecordError(book_id, record.version)

            return self._to_model(session.get(BookDB, book_id))

    def remove(self, book_id: int) -> bool:
        stmt = delete(BookDB).where(BookDB.id == book_id)
        with self.db_manager.session_scope() as session:
            result = session.execute(stmt)
            return result.rowcount > 0
