"""Unit tests for settings and logging configuration."""

import pytest
from loguru import logger
from pydantic import ValidationError

from referral_engine.config.logging import setup_logging
from referral_engine.config.settings import Settings


class TestSettings:
    """Test settings validation."""

    def test_sqlite_url_accepted(self):
        """SQLite async URLs are allowed for local runs."""
        config = Settings(database_url="sqlite+aiosqlite:///engine.db")

        assert config.async_database_url == "sqlite+aiosqlite:///engine.db"

    def test_postgres_url_gets_async_driver(self):
        """Plain PostgreSQL URLs are switched to asyncpg."""
        config = Settings(database_url="postgresql://u:p@localhost/db")

        assert (
            config.async_database_url
            == "postgresql+asyncpg://u:p@localhost/db"
        )

    def test_unsupported_url_rejected(self):
        """Other databases are rejected."""
        with pytest.raises(ValidationError):
            Settings(database_url="mysql://u:p@localhost/db")

    def test_log_level_normalized(self):
        """Log levels are upper-cased and checked."""
        config = Settings(
            database_url="sqlite+aiosqlite://", log_level="debug"
        )

        assert config.log_level == "DEBUG"

        with pytest.raises(ValidationError):
            Settings(database_url="sqlite+aiosqlite://", log_level="LOUD")

    def test_code_attempts_default(self):
        """Code generation retries default to 10 and must be positive."""
        assert Settings(
            database_url="sqlite+aiosqlite://"
        ).code_generation_max_attempts == 10

        with pytest.raises(ValidationError):
            Settings(
                database_url="sqlite+aiosqlite://",
                code_generation_max_attempts=0,
            )


class TestSetupLogging:
    """Test loguru sink configuration."""

    def test_file_sink_created(self, tmp_path):
        """A log file is written when log_file is set."""
        log_file = tmp_path / "engine.log"
        config = Settings(
            database_url="sqlite+aiosqlite://",
            log_file=str(log_file),
            log_level="INFO",
        )

        try:
            setup_logging(config)
            logger.info("Engine started")
            logger.complete()
        finally:
            logger.remove()

        assert log_file.exists()
        assert "Engine started" in log_file.read_text(encoding="utf-8")

    def test_without_file_sink(self, tmp_path):
        """An empty log_file configures stderr only."""
        config = Settings(database_url="sqlite+aiosqlite://", log_file="")

        try:
            setup_logging(config)
        finally:
            logger.remove()

        assert list(tmp_path.iterdir()) == []
