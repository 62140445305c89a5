"""Tests for Book Ledger configuration.

These tests cover:
1. Default values
2. Environment variable loading
3. Validation of patterns and bounds
4. The global configuration accessor
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from book_ledger.config import LedgerConfig, get_config, reset_config


class TestLedgerConfig:
    def test_default_configuration(self, clean_env):
        config = LedgerConfig(_env_file=None)

        assert config.server_name == "book-ledger"
        assert config.server_version == "0.1.0"
        assert config.storage_backend == "sqlalchemy"
        assert config.database_path == Path("data/book_ledger.db").absolute()
        assert config.database_url is None
        assert config.max_transition_retries == 10
        assert config.enforce_return_bound is False
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_environment_variable_loading(self, clean_env):
        env_vars = {
            "BOOK_LEDGER_STORAGE_BACKEND": "memory",
            "BOOK_LEDGER_DATABASE_PATH": "/tmp/ledger-test.db",
            "BOOK_LEDGER_MAX_TRANSITION_RETRIES": "25",
            "BOOK_LEDGER_ENFORCE_RETURN_BOUND": "true",
            "BOOK_LEDGER_LOG_LEVEL": "DEBUG",
        }

        with patch.dict(os.environ, env_vars):
            config = LedgerConfig(_env_file=None)

            assert config.storage_backend == "memory"
            assert config.database_path == Path("/tmp/ledger-test.db")
            assert config.max_transition_retries == 25
            assert config.enforce_return_bound is True
            assert config.log_level == "DEBUG"

    def test_environment_is_case_insensitive(self, clean_env):
        with patch.dict(os.environ, {"book_ledger_debug": "true"}):
            config = LedgerConfig(_env_file=None)

            assert config.debug is True

    @pytest.mark.parametrize("backend", ["postgres", "MEMORY", ""])
    def test_invalid_storage_backend(self, backend):
        with pytest.raises(ValidationError):
            LedgerConfig(storage_backend=backend)

    @pytest.mark.parametrize("retries", [0, 1001])
    def test_retry_bounds(self, retries):
        with pytest.raises(ValidationError):
            LedgerConfig(max_transition_retries=retries)

    @pytest.mark.parametrize("name", ["Book_Ledger", "book ledger", "ab", "a" * 51])
    def test_invalid_server_names(self, name):
        with pytest.raises(ValidationError):
            LedgerConfig(server_name=name)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LedgerConfig(log_level="TRACE")


class TestDatabaseUrl:
    def test_url_from_path(self, tmp_path):
        config = LedgerConfig(database_path=tmp_path / "ledger.db")

        assert config.get_database_url() == f"sqlite:///{tmp_path / 'ledger.db'}"

    def test_explicit_url_wins(self, tmp_path):
        config = LedgerConfig(
            database_path=tmp_path / "ledger.db",
            database_url="postgresql://ledger@localhost/books",
        )

        assert config.get_database_url() == "postgresql://ledger@localhost/books"


class TestGlobalConfig:
    def test_get_config_is_cached(self, clean_env):
        reset_config()

        assert get_config() is get_config()

    def test_reset_config_creates_new_instance(self, clean_env):
        reset_config()
        first = get_config()

        reset_config()

        assert get_config() is not first
