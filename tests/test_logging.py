"""Tests for logging setup."""

import asyncio
import json
import logging

import pytest

from multipart_checksum.logging import (
    PACKAGE_LOGGER,
    DetailedFormatter,
    LogContext,
    SimpleFormatter,
    StructuredFormatter,
    setup_logging,
)



def make_record(message="hello", **extra):
    record = logging.LogRecord(PACKAGE_LOGGER, logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(make_record()))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == PACKAGE_LOGGER

    def test_extra_and_context_fields(self):
        record = make_record(extra_fields={"part_index": 1}, context_fields={"path": "/a"})

        data = json.loads(StructuredFormatter().format(record))

        assert data["part_index"] == 1
        assert data["path"] == "/a"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_formatter(self, restore_package_logger):
        logger = setup_logging(level="debug", format="detailed")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, DetailedFormatter)

    def test_repeated_setup_replaces_handlers(self, restore_package_logger):
        setup_logging(format="simple")
        logger = setup_logging(format="simple")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, SimpleFormatter)

    def test_log_file_is_json(self, restore_package_logger, tmp_path):
        log_file = tmp_path / "logs" / "checksum.log"
        logger = setup_logging(log_file=log_file)

        logger.info("written", extra={"extra_fields": {"parts_count": 2}})
        for handler in logger.handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "written"
        assert data["parts_count"] == 2

    def test_unknown_format(self, restore_package_logger):
        with pytest.raises(ValueError):
            setup_logging(format="xml")


class TestLogContext:
    """Tests for LogContext."""

    def test_fields_attached_and_removed(self, caplog):
        logger = logging.getLogger(f"{PACKAGE_LOGGER}.test")

        with caplog.at_level(logging.INFO, logger=PACKAGE_LOGGER):
            with LogContext(path="/data/file"):
                logger.info("inside", extra={"extra_fields": {"parts_count": 3}})
            logger.info("outside")

        inside, outside = caplog.records
        assert inside.context_fields == {"path": "/data/file"}
        assert inside.extra_fields == {"parts_count": 3}
        assert not hasattr(outside, "context_fields")

    def test_nested_contexts_merge(self, caplog):
        logger = logging.getLogger(f"{PACKAGE_LOGGER}.test")

        with caplog.at_level(logging.INFO, logger=PACKAGE_LOGGER):
            with LogContext(path="/data/file"):
                with LogContext(part_index=2):
                    logger.info("nested")

        assert caplog.records[0].context_fields == {"path": "/data/file", "part_index": 2}

    @pytest.mark.asyncio
    async def test_concurrent_tasks_keep_their_own_fields(self, caplog):
        logger = logging.getLogger(f"{PACKAGE_LOGGER}.test")
        first_entered = asyncio.Event()
        second_entered = asyncio.Event()

        async def first():
            with LogContext(path="/first"):
                first_entered.set()
                await second_entered.wait()
                logger.info("first")

        async def second():
            await first_entered.wait()
            with LogContext(path="/second"):
                second_entered.set()
                await asyncio.sleep(0)
                logger.info("second")

        with caplog.at_level(logging.INFO, logger=PACKAGE_LOGGER):
            await asyncio.gather(first(), second())

        fields = {record.getMessage(): record.context_fields for record in caplog.records}
        assert fields == {"first": {"path": "/first"}, "second": {"path": "/second"}}
