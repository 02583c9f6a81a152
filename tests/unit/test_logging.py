"""
Unit tests for structured logging helpers and call tracing.
"""

import logging

import pytest

from mdb_convert import (Converter, ConverterConfig, convert_raw_collection,
                         set_config)
from mdb_convert.observability.logging import (clear_collection_context,
                                               clear_correlation_id,
                                               get_correlation_id, get_logger,
                                               get_logging_context,
                                               log_operation,
                                               set_collection_context,
                                               set_correlation_id)


@pytest.fixture(autouse=True)
def clean_logging_context():
    yield
    clear_correlation_id()
    clear_collection_context()


class TestLoggingContext:
    def test_correlation_id_generated(self):
        correlation_id = set_correlation_id()

        assert correlation_id
        assert get_correlation_id() == correlation_id
        assert get_logging_context()["correlation_id"] == correlation_id

    def test_collection_context_included(self):
        set_collection_context("users", database="app")

        context = get_logging_context()

        assert context["collection"] == "users"
        assert context["database"] == "app"

    def test_cleared_context_omitted(self):
        set_correlation_id("abc")
        clear_correlation_id()

        assert "correlation_id" not in get_logging_context()

    def test_adapter_adds_context(self, caplog):
        set_correlation_id("req-1")
        logger = get_logger("mdb_convert.tests")

        with caplog.at_level(logging.INFO, logger="mdb_convert.tests"):
            logger.info("hello")

        assert caplog.records[-1].correlation_id == "req-1"


class TestLogOperation:
    def test_failure_message(self, caplog):
        logger = logging.getLogger("mdb_convert.tests.ops")

        with caplog.at_level(logging.INFO, logger="mdb_convert.tests.ops"):
            log_operation(logger, "converter.insert_one", success=False, duration_ms=1.234)

        record = caplog.records[-1]
        assert record.getMessage() == "Operation failed: converter.insert_one (duration: 1.23ms)"
        assert record.duration_ms == 1.23
        assert record.success is False

    def test_disabled_level_skipped(self, caplog):
        logger = logging.getLogger("mdb_convert.tests.quiet")

        with caplog.at_level(logging.WARNING, logger="mdb_convert.tests.quiet"):
            log_operation(logger, "converter.find", level=logging.DEBUG)

        assert not caplog.records


@pytest.mark.unit
class TestCallTracing:
    @staticmethod
    def _converter():
        return Converter(
            pre_insert=lambda doc: doc,
            pre_update=lambda update: update,
            pre_replace=lambda doc: doc,
            post_find=lambda doc: doc,
            delete_filter=lambda f: f,
        )

    def test_intercepted_calls_logged_when_enabled(self, mock_sync_collection, caplog):
        set_config(ConverterConfig(log_calls=True))
        users = convert_raw_collection(mock_sync_collection, self._converter())

        with caplog.at_level(logging.DEBUG, logger="mdb_convert.converter"):
            users.delete_one({"name": "Ada"})

        record = caplog.records[-1]
        assert record.operation == "converter.delete_one"
        assert record.collection == "users"
        assert "Ada" not in record.getMessage()

    def test_calls_not_logged_by_default(self, mock_sync_collection, caplog):
        users = convert_raw_collection(mock_sync_collection, self._converter())

        with caplog.at_level(logging.DEBUG, logger="mdb_convert.converter"):
            users.delete_one({"name": "Ada"})

        assert not [r for r in caplog.records if getattr(r, "operation", None)]
