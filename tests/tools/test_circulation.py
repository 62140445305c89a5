"""
Tests for the circulation tools (add, delete, lend, return).

These tests cover:
1. Input validation
2. Success responses and their structured data
3. Error responses carrying the ledger's error kind
4. State changes in the underlying store
"""

import pytest

from book_ledger.tools import circulation
from book_ledger.tools.circulation import (
    add_book_handler,
    delete_book_handler,
    lend_book_handler,
    return_book_handler,
)


@pytest.fixture(autouse=True)
def use_test_ledger(monkeypatch, ledger):
    """Route every handler to the per-test ledger."""
    monkeypatch.setattr(circulation, "get_ledger", lambda: ledger)
    return ledger


class TestAddBookTool:
    async def test_add_success(self, ledger):
        result = await add_book_handler({"title": "Dune", "author": "Frank Herbert", "copies": 3})

        assert not result.get("isError")
        assert "Added 'Dune' by Frank Herbert" in result["content"][0]["text"]

        book = result["data"]["book"]
        assert book["copies"] == 3
        assert book["available_copies"] == 3
        assert ledger.get_by_id(book["id"]).title == "Dune"

    async def test_add_with_available_copies(self):
        result = await add_book_handler(
            {"title": "Dune", "author": "Frank Herbert", "copies": 3, "available_copies": 1}
        )

        assert result["data"]["book"]["available_copies"] == 1

    async def test_add_negative_copies(self, ledger):
        result = await add_book_handler({"title": "Dune", "author": "Frank Herbert", "copies": -2})

        assert result["isError"] is True
        assert result["errorKind"] == "validation"
        assert "copies must be >= 0" in result["content"][0]["text"]
        assert ledger.list_all() == []

    async def test_add_missing_arguments(self):
        result = await add_book_handler({"title": "Dune"})

        assert result["isError"] is True
        assert result["errorKind"] == "validation"
        assert "Invalid add_book parameters" in result["content"][0]["text"]


class TestDeleteBookTool:
    async def test_delete_success(self, ledger, seed_book):
        book = seed_book()

        result = await delete_book_handler({"book_id": book.id})

        assert not result.get("isError")
        assert result["data"]["deleted_id"] == book.id
        assert ledger.get_by_id(book.id) is None

    async def test_delete_missing(self):
        result = await delete_book_handler({"book_id": 100})

        assert result["isError"] is True
        assert result["errorKind"] == "not_found"
        assert "not found" in result["content"][0]["text"]


class TestLendBookTool:
    async def test_lend_success(self, ledger, seed_book):
        book = seed_book(title="Test Book", copies=3)

        result = await lend_book_handler({"book_id": book.id})

        assert not result.get("isError")
        assert "Lent a copy of 'Test Book'" in result["content"][0]["text"]
        assert result["data"]["book"]["available_copies"] == 2
        assert ledger.get_by_id(book.id).available_copies == 2

    async def test_lend_no_copies(self, seed_book):
        book = seed_book(copies=1, available_copies=0)

        result = await lend_book_handler({"book_id": book.id})

        assert result["isError"] is True
        assert result["errorKind"] == "no_copies_available"

    async def test_lend_missing(self):
        result = await lend_book_handler({"book_id": 100})

        assert result["errorKind"] == "not_found"

    @pytest.mark.parametrize("arguments", [{}, {"book_id": 0}, {"book_id": "abc"}])
    async def test_lend_invalid_arguments(self, arguments):
        result = await lend_book_handler(arguments)

        assert result["isError"] is True
        assert result["errorKind"] == "validation"


class TestReturnBookTool:
    async def test_return_success(self, ledger, seed_book):
        book = seed_book(copies=3, available_copies=2)

        result = await return_book_handler({"book_id": book.id})

        assert not result.get("isError")
        assert result["data"]["book"]["available_copies"] == 3
        assert ledger.get_by_id(book.id).available_copies == 3

    async def test_return_missing(self):
        result = await return_book_handler({"book_id": 100})

        assert result["isError"] is True
        assert result["errorKind"] == "not_found"
