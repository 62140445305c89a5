"""
Tests for LedgerResult, LedgerError and the exception taxonomy.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from book_ledger.ledger import (
    AllCopiesReturnedError,
    ConcurrencyError,
    ErrorKind,
    LedgerException,
    LedgerResult,
    NoCopiesAvailableError,
    NotFoundError,
    ValidationError,
)
from book_ledger.models import Book


class TestLedgerResult:
    def test_success_unwraps_value(self):
        book = Book(id=1, title="A", author="B", copies=1, available_copies=1)

        result = LedgerResult[Book].success(book)

        assert result.ok
        assert result.error is None
        assert result.unwrap() == book

    def test_failure_carries_kind_and_book_id(self):
        result = LedgerResult.failure(ErrorKind.NOT_FOUND, "missing", book_id=7)

        assert not result.ok
        assert result.value is None
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.book_id == 7
        assert result.error.message == "missing"

    @pytest.mark.parametrize(
        ("kind", "exception"),
        [
            (ErrorKind.NOT_FOUND, NotFoundError),
            (ErrorKind.NO_COPIES_AVAILABLE, NoCopiesAvailableError),
            (ErrorKind.ALL_COPIES_RETURNED, AllCopiesReturnedError),
            (ErrorKind.VALIDATION, ValidationError),
            (ErrorKind.CONFLICT, ConcurrencyError),
        ],
    )
    def test_unwrap_raises_mapped_exception(self, kind, exception):
        result = LedgerResult.failure(kind, "nope")

        with pytest.raises(exception, match="nope"):
            result.unwrap()

    def test_results_are_immutable(self):
        result = LedgerResult.failure(ErrorKind.NOT_FOUND, "missing")

        with pytest.raises(PydanticValidationError):
            result.error = None


class TestErrorTaxonomy:
    def test_no_copies_is_a_not_found_error(self):
        assert issubclass(NoCopiesAvailableError, NotFoundError)

    def test_all_errors_share_a_base(self):
        for exc in (
            NotFoundError,
            NoCopiesAvailableError,
            AllCopiesReturnedError,
            ValidationError,
            ConcurrencyError,
        ):
            assert issubclass(exc, LedgerException)

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ErrorKind.NOT_FOUND, True),
            (ErrorKind.NO_COPIES_AVAILABLE, True),
            (ErrorKind.ALL_COPIES_RETURNED, False),
            (ErrorKind.VALIDATION, False),
            (ErrorKind.CONFLICT, False),
        ],
    )
    def test_is_not_found(self, kind, expected):
        assert LedgerResult.failure(kind, "x").error.is_not_found is expected

    def test_error_kind_values_are_stable(self):
        assert ErrorKind.NO_COPIES_AVAILABLE.value == "no_copies_available"
        assert ErrorKind("not_found") is ErrorKind.NOT_FOUND
