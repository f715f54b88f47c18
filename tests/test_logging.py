# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Tests - Log context and formatters
# PURPOSE: Verify context nesting and JSON / human output
# CREATED: 16 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import json
import logging

import pytest

from core.logging import (
    ComponentType,
    HumanFormatter,
    StructuredFormatter,
    configure_logging,
    get_current_context,
    get_logger,
    log_context,
)


# ============================================================================
# FIXTURES
# ============================================================================

def _record(message="Schema cache miss", **attrs):
    record = logging.LogRecord(
        name="relation.cache",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# CONTEXT
# ============================================================================

class TestLogContext:

    def test_nesting_inherits_parent(self):
        with log_context(repo="MyApp.Repo"):
            with log_context(table="users", dialect="postgres"):
                context = get_current_context()
                assert context.repo == "MyApp.Repo"
                assert context.table == "users"
            assert get_current_context().table is None

        assert get_current_context().to_dict() == {}

    def test_extra_merged(self):
        with log_context(extra={"a": 1}):
            with log_context(extra={"b": 2}):
                assert get_current_context().to_dict() == {"a": 1, "b": 2}


# ============================================================================
# FORMATTERS
# ============================================================================

class TestFormatters:

    def test_structured(self):
        formatter = StructuredFormatter()
        with log_context(repo="MyApp.Repo", table="users"):
            data = json.loads(formatter.format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "relation.cache"
        assert data["message"] == "Schema cache miss"
        assert data["context"] == {"repo": "MyApp.Repo", "table": "users"}
        assert data["timestamp"].endswith("Z")

    def test_structured_extra(self):
        formatter = StructuredFormatter(include_timestamp=False, include_context=False)
        data = json.loads(formatter.format(_record(extra={"digest": "ABC"})))

        assert "timestamp" not in data
        assert "context" not in data
        assert data["data"] == {"digest": "ABC"}

    def test_human(self):
        formatter = HumanFormatter()
        with log_context(repo="MyApp.Repo", dialect="sqlite"):
            line = formatter.format(_record())

        assert "relation.cache [repo=MyApp.Repo, dialect=sqlite]: Schema cache miss" in line
        assert "INFO" in line


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestConfigure:

    def test_json_output(self, restore_root, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        configure_logging("debug", json_output=True)

        assert restore_root.level == logging.DEBUG
        assert len(restore_root.handlers) == 1
        assert isinstance(restore_root.handlers[0].formatter, StructuredFormatter)

    def test_human_output(self, restore_root, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        configure_logging(logging.WARNING)

        assert restore_root.level == logging.WARNING
        assert isinstance(restore_root.handlers[0].formatter, HumanFormatter)

    def test_context_logger(self, caplog):
        logger = get_logger("relation.test", ComponentType.CACHE)

        with caplog.at_level(logging.INFO, logger="relation.test"):
            with log_context(repo="MyApp.Repo"):
                logger.info("warmed up")

        record = caplog.records[-1]
        assert record.getMessage() == "warmed up"
        assert record.extra == {"component": "cache", "repo": "MyApp.Repo"}

    def test_logger_without_component(self, caplog):
        logger = get_logger("relation.test")

        with caplog.at_level(logging.INFO, logger="relation.test"):
            logger.info("no component")

        assert caplog.records[-1].extra == {}
