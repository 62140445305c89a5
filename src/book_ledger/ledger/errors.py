"""
Error taxonomy and result type for Book Ledger operations.

Ledger mutations do not raise for business outcomes. They return a
``LedgerResult`` that either carries the value or a ``LedgerError`` tagged
with an ``ErrorKind``, so callers can branch on the kind directly:

```python
result = ledger.lend(book_id)
if not result.ok and result.error.kind is ErrorKind.NO_COPIES_AVAILABLE:
    ...
```

Callers that prefer exceptions call ``unwrap()``, which raises the exception
class mapped to the kind. ``NoCopiesAvailableError`` subclasses
``NotFoundError``: a lend against an exhausted book is still a "not found"
class failure, as the lending contract has always reported it, but it is now
distinguishable from a missing record.
"""

import enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class LedgerException(Exception):
    """Base exception for ledger operations."""


class NotFoundError(LedgerException):
    """Raised when no book has the requested id."""


class NoCopiesAvailableError(NotFoundError):
    """Raised when lending a book whose available copies are exhausted."""


class AllCopiesReturnedError(LedgerException):
    """Raised when a return would exceed the total copies (return bound enforced)."""


class ValidationError(LedgerException):
    """Raised when book input breaks a ledger rule (e.g. negative copies)."""


class ConcurrencyError(LedgerException):
    """Raised when a transition keeps losing to concurrent writers."""


class ErrorKind(str, enum.Enum):
    """Distinct failure kinds a ledger operation can report."""

    NOT_FOUND = "not_found"
    NO_COPIES_AVAILABLE = "no_copies_available"
    ALL_COPIES_RETURNED = "all_copies_returned"
    VALIDATION = "validation"
    CONFLICT = "conflict"


_EXCEPTIONS: dict[ErrorKind, type[LedgerException]] = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.NO_COPIES_AVAILABLE: NoCopiesAvailableError,
    ErrorKind.ALL_COPIES_RETURNED: AllCopiesReturnedError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.CONFLICT: ConcurrencyError,
}


class LedgerError(BaseModel):
    """A failed ledger operation."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    book_id: int | None = None

    @property
    def is_not_found(self) -> bool:
        """True for every failure the lending contract reports as "not found"."""
        return self.kind in (ErrorKind.NOT_FOUND, ErrorKind.NO_COPIES_AVAILABLE)

    def to_exception(self) -> LedgerException:
        return _EXCEPTIONS[self.kind](self.message)


class LedgerResult(BaseModel, Generic[T]):
    """Outcome of a ledger operation: exactly one of ``value`` or ``error``."""

    model_config = ConfigDict(frozen=True)

    value: T | None = None
    error: LedgerError | None = None

    @classmethod
    def success(cls, value: T) -> "LedgerResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, book_id: int | None = None
    ) -> "LedgerResult[T]":
        return cls(error=LedgerError(kind=kind, message=message, book_id=book_id))

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the value or raise the exception mapped to the error kind.

        Raises:
            LedgerException: The subclass matching ``error.kind``
        """
        if self.error is not None:
            raise self.error.to_exception()
        return self.value  # type: ignore[return-value]
