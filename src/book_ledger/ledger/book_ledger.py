"""
The Book Ledger: atomic operations over Book records.

Every mutation of a stored book is a read-modify-write cycle. Two callers
lending the last copy at the same time must not both succeed, so lend,
return and update run as an optimistic loop on top of the backend's
compare-and-set:

1. Fetch the current record (including its version)
2. Apply the guard and compute the next state
3. ``backend.update`` writes it only if the version is unchanged
4. On ``StaleRecordError`` another writer won; re-read and go again

The only write is the final compare-and-set, so a failed or abandoned
attempt leaves the record as it was. Concurrent transitions on one id are
therefore equivalent to some sequential order of them; different ids never
interact.

A lend or return that loses ``max_retries`` races in a row takes a
per-record lock and keeps going until it either commits or its guard
fails. Every lost race means some other writer committed, so this always
finishes, and a lend only fails while copies remain if the book is gone.
Updates are edits made by a person and report CONFLICT instead.

Business failures come back as ``LedgerResult`` values (see ``errors.py``).
Storage failures are not business outcomes and propagate as ``StorageError``.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import LedgerConfig, get_config
from ..database.backend import StaleRecordError, StorageBackend
from ..database.memory_backend import MemoryBackend
from ..database.session import DatabaseManager
from ..database.sql_backend import SQLAlchemyBackend
from ..models.book import Book, BookCreate, BookUpdate
from .errors import ErrorKind, LedgerError, LedgerResult
from .guards import book_rule_violations, can_lend, can_return

logger = logging.getLogger(__name__)

# Computes the next state of a record, or the reason it cannot change.
Transition = Callable[[Book], Book | LedgerError]


class BookLedger:
    """
    Atomic create/read/update/delete and lend/return over a StorageBackend.

    The ledger keeps no state of its own besides its settings, so any number
    of ledgers (or processes) can share one backend.
    """

    def __init__(
        self,
        backend: StorageBackend,
        max_retries: int | None = None,
        enforce_return_bound: bool | None = None,
    ):
        """
        Args:
            backend: The store holding the records
            max_retries: Optimistic attempts before a lend or return falls back
                to a per-record lock, and before an update reports a conflict.
                Defaults to ``max_transition_retries`` from configuration.
            enforce_return_bound: Reject returns past the total copies.
                Defaults to ``enforce_return_bound`` from configuration.
        """
        if max_retries is None or enforce_return_bound is None:
            config = get_config()
            if max_retries is None:
                max_retries = config.max_transition_retries
            if enforce_return_bound is None:
                enforce_return_bound = config.enforce_return_bound

        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")

        self.backend = backend
        self.max_retries = max_retries
        self.enforce_return_bound = enforce_return_bound
        self._record_locks: dict[int, threading.Lock] = {}
        self._record_locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_all(self) -> list[Book]:
        """Return every stored book, ordered by id."""
        return self.backend.fetch_all()

    def get_by_id(self, book_id: int) -> Book | None:
        """Return the book, or None if no book has that id."""
        return self.backend.fetch(book_id)

    # ------------------------------------------------------------------
    # Create / delete
    # ------------------------------------------------------------------

    def add(self, data: BookCreate | Mapping[str, Any]) -> LedgerResult[Book]:
        """
        Validate and store a new book.

        ``available_copies`` defaults to ``copies`` when not given. The store
        assigns the id.

        Returns:
            The stored book, or a VALIDATION failure (e.g. negative copies)
        """
        if not isinstance(data, BookCreate):
            try:
                data = BookCreate.model_validate(data)
            except PydanticValidationError as e:
                logger.info("Rejected book input: %s", e)
                return LedgerResult.failure(ErrorKind.VALIDATION, f"Invalid book data: {e}")

        available = data.available_copies if data.available_copies is not None else data.copies
        candidate = Book(
            title=data.title,
            author=data.author,
            copies=data.copies,
            available_copies=available,
        )

        problems = book_rule_violations(candidate)
        if problems:
            logger.info("Rejected book %r: %s", data.title, "; ".join(problems))
            return LedgerResult.failure(ErrorKind.VALIDATION, "; ".join(problems))

        book_id = self.backend.insert(candidate)
        logger.info("Added book %s %r with %d copies", book_id, candidate.title, candidate.copies)
        return LedgerResult.success(candidate.model_copy(update={"id": book_id, "version": 0}))

    def delete(self, book_id: int) -> LedgerResult[int]:
        """
        Remove a book entirely.

        Deleting is not idempotent: a second delete of the same id is a
        NOT_FOUND failure, like any other unknown id.

        Returns:
            The deleted id, or a NOT_FOUND failure
        """
        if not self.backend.remove(book_id):
            return self._not_found(book_id, "delete")

        with self._record_locks_guard:
            self._record_locks.pop(book_id, None)

        logger.info("Deleted book %s", book_id)
        return LedgerResult.success(book_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def lend(self, book_id: int) -> LedgerResult[Book]:
        """
        Lend one copy: available_copies n -> n-1, only when n > 0.

        Returns:
            The updated book, or NOT_FOUND / NO_COPIES_AVAILABLE
        """

        def take_copy(current: Book) -> Book | LedgerError:
            if not can_lend(current):
                return LedgerError(
                    kind=ErrorKind.NO_COPIES_AVAILABLE,
                    message=f"No copies of book {book_id} are available",
                    book_id=book_id,
                )
            return current.model_copy(update={"available_copies": current.available_copies - 1})

        return self._transition(book_id, "lend", take_copy)

    def return_(self, book_id: int) -> LedgerResult[Book]:
        """
        Return one copy: available_copies n -> n+1.

        The upper bound (n < copies) is only checked when the ledger was built
        with ``enforce_return_bound``.

        Returns:
            The updated book, or NOT_FOUND / ALL_COPIES_RETURNED
        """

        def put_back(current: Book) -> Book | LedgerError:
            if not can_return(current, self.enforce_return_bound):
                return LedgerError(
                    kind=ErrorKind.ALL_COPIES_RETURNED,
                    message=f"All {current.copies} copies of book {book_id} are already returned",
                    book_id=book_id,
                )
            return current.model_copy(update={"available_copies": current.available_copies + 1})

        return self._transition(book_id, "return", put_back)

    def update(self, book_id: int, data: BookUpdate | Mapping[str, Any]) -> LedgerResult[Book]:
        """
        Edit fields of a stored book.

        Only fields explicitly set on ``data`` are applied, and only the rules
        involving those fields are checked: renaming a book whose returns
        have pushed available_copies past copies is allowed, changing either
        count is not. An update that sets nothing returns the stored record
        without writing it.

        Returns:
            The updated book, or NOT_FOUND / VALIDATION / CONFLICT
        """
        if not isinstance(data, BookUpdate):
            try:
                data = BookUpdate.model_validate(data)
            except PydanticValidationError as e:
                return LedgerResult.failure(
                    ErrorKind.VALIDATION, f"Invalid book data: {e}", book_id=book_id
                )

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            current = self.backend.fetch(book_id)
            if current is None:
                return self._not_found(book_id, "update")
            return LedgerResult.success(current)

        def edit(current: Book) -> Book | LedgerError:
            candidate = current.model_copy(update=changes)
            problems = book_rule_violations(candidate, fields=changes.keys())
            if problems:
                return LedgerError(
                    kind=ErrorKind.VALIDATION, message="; ".join(problems), book_id=book_id
                )
            return candidate

        return self._transition(book_id, "update", edit, give_up=True)

    def _transition(
        self, book_id: int, operation: str, apply: Transition, give_up: bool = False
    ) -> LedgerResult[Book]:
        for attempt in range(1, self.max_retries + 1):
            result = self._attempt(book_id, operation, apply)
            if result is not None:
                return result
            logger.debug(
                "Concurrent change to book %s during %s (attempt %d/%d), retrying",
                book_id,
                operation,
                attempt,
                self.max_retries,
            )

        if give_up:
            logger.warning(
                "Giving up on %s of book %s after %d conflicting attempts",
                operation,
                book_id,
                self.max_retries,
            )
            return LedgerResult.failure(
                ErrorKind.CONFLICT,
                f"Book {book_id} kept changing during {operation}; try again",
                book_id=book_id,
            )

        logger.info(
            "Book %s is contended; serializing %s after %d attempts",
            book_id,
            operation,
            self.max_retries,
        )
        with self._record_lock(book_id):
            while True:
                result = self._attempt(book_id, operation, apply)
                if result is not None:
                    return result

    def _attempt(
        self, book_id: int, operation: str, apply: Transition
    ) -> LedgerResult[Book] | None:
        """One read-check-write pass. None means another writer won the race."""
        current = self.backend.fetch(book_id)
        if current is None:
            return self._not_found(book_id, operation)

        outcome = apply(current)
        if isinstance(outcome, LedgerError):
            logger.info("Cannot %s book %s: %s", operation, book_id, outcome.message)
            return LedgerResult(error=outcome)

        try:
            stored = self.backend.update(book_id, outcome)
        except StaleRecordError:
            return None

        if stored is None:
            # Deleted between our read and our write.
            return self._not_found(book_id, operation)

        logger.info(
            "%s book %s: %d of %d copies available",
            operation.capitalize(),
            book_id,
            stored.available_copies,
            stored.copies,
        )
        return LedgerResult.success(stored)

    def _record_lock(self, book_id: int) -> threading.Lock:
        with self._record_locks_guard:
            return self._record_locks.setdefault(book_id, threading.Lock())

    @staticmethod
    def _not_found(book_id: int, operation: str) -> LedgerResult:
        logger.info("Cannot %s book %s: not found", operation, book_id)
        return LedgerResult.failure(
            ErrorKind.NOT_FOUND, f"Book with id {book_id} not found", book_id=book_id
        )


# ----------------------------------------------------------------------
# Construction
# ----------------------------------------------------------------------


def create_ledger(config: LedgerConfig | None = None, init_schema: bool = True) -> BookLedger:
    """
    Build a ledger on the configured storage backend.

    Args:
        config: Settings to use. Defaults to the global configuration.
        init_schema: Create the SQL tables if they do not exist yet
    """
    config = config or get_config()

    if config.storage_backend == "memory":
        backend: StorageBackend = MemoryBackend()
    else:
        db_manager = DatabaseManager(
            config.get_database_url(), busy_timeout=config.sqlite_busy_timeout
        )
        if init_schema:
            db_manager.init_database()
        backend = SQLAlchemyBackend(db_manager)

    logger.info("Ledger ready on %s backend", config.storage_backend)
    return BookLedger(
        backend,
        max_retries=config.max_transition_retries,
        enforce_return_bound=config.enforce_return_bound,
    )


class _LedgerStore:
    """Internal storage for the process-wide ledger."""

    _instance: BookLedger | None = None


def get_ledger() -> BookLedger:
    """Get or create the process-wide ledger used by the MCP surface."""
    if _LedgerStore._instance is None:  # type: ignore[reportPrivateUsage]
        _LedgerStore._instance = create_ledger()  # type: ignore[reportPrivateUsage]
    return _LedgerStore._instance  # type: ignore[reportPrivateUsage]


def reset_ledger() -> None:
    """Drop the process-wide ledger (useful for testing)."""
    _LedgerStore._instance = None  # type: ignore[reportPrivateUsage]
