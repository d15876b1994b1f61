"""
Unit tests for utility modules.

Tests for error_handling and advanced_logging.
"""

import logging

import pytest
from unittest.mock import Mock

from clustersim.utils.advanced_logging import (
    LogContext,
    PerformanceLogger,
    add_run_context,
    configure_logging,
    get_logger,
    log_exceptions,
    timed,
)
from clustersim.utils.error_handling import (
    ClusteringError,
    ClusterSimError,
    ConfigurationError,
    DatasetError,
    InvalidAlgorithmError,
    InvalidParameterError,
    UnknownDatasetError,
)


@pytest.mark.unit
class TestErrorHandling:
    """Test error handling utilities."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, ClusterSimError)
        assert issubclass(InvalidAlgorithmError, ClusteringError)
        assert issubclass(InvalidParameterError, ClusteringError)
        assert issubclass(UnknownDatasetError, DatasetError)
        assert issubclass(DatasetError, ClusterSimError)

    def test_message_and_defaults(self):
        error = ClusteringError("Test error")

        assert str(error) == "Test error"
        assert error.error_code == "ClusteringError"
        assert error.details == {}

    def test_to_dict(self):
        error = UnknownDatasetError("no such dataset", error_code="E_DATASET", details={"dataset": "x"})

        data = error.to_dict()

        assert data["error_type"] == "UnknownDatasetError"
        assert data["error_code"] == "E_DATASET"
        assert data["message"] == "no such dataset"
        assert data["details"] == {"dataset": "x"}
        assert data["timestamp"] > 0


@pytest.mark.unit
class TestAdvancedLogging:
    """Test advanced logging utilities."""

    def test_configure_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "clustersim.log"

        configure_logging(log_level="DEBUG", log_format="json", log_file=str(log_file))
        file_handlers = [
            handler for handler in logging.root.handlers
            if getattr(handler, "baseFilename", None) == str(log_file)
        ]

        try:
            assert logging.root.level == logging.DEBUG
            assert len(file_handlers) == 1
        finally:
            for handler in file_handlers:
                logging.root.removeHandler(handler)
                handler.close()

        configure_logging(log_level="INFO")
        assert logging.root.level == logging.INFO

    def test_configure_logging_twice_keeps_one_file_handler(self, tmp_path):
        log_file = tmp_path / "clustersim.log"

        configure_logging(log_level="INFO", log_file=str(log_file))
        configure_logging(log_level="WARNING", log_file=str(log_file))
        file_handlers = [
            handler for handler in logging.root.handlers
            if getattr(handler, "baseFilename", None) == str(log_file)
        ]

        try:
            assert len(file_handlers) == 1
            assert file_handlers[0].level == logging.WARNING
        finally:
            for handler in file_handlers:
                logging.root.removeHandler(handler)
                handler.close()
            configure_logging(log_level="INFO")

    def test_configure_logging_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging(log_level="LOUD")

    def test_correlation_context(self):
        LogContext.clear_correlation_id()

        with LogContext.correlation_context("run-1"):
            assert LogContext.get_correlation_id() == "run-1"
            with LogContext.correlation_context("run-2"):
                assert LogContext.get_correlation_id() == "run-2"
            assert LogContext.get_correlation_id() == "run-1"

        assert LogContext.get_correlation_id() is None

    def test_run_context_processor(self):
        processor = add_run_context("clustersim-test")

        with LogContext.correlation_context("run-9"):
            event = processor(None, "info", {"event": "clustering"})

        assert event["service"] == "clustersim-test"
        assert event["correlation_id"] == "run-9"

    def test_get_logger(self):
        assert get_logger("clustersim.test") is not None

    def test_performance_logger(self):
        logger = Mock()

        with PerformanceLogger("cluster", logger=logger, item_count=10, algorithm="dbscan") as timer:
            sum(range(1000))

        assert timer.elapsed_time > 0
        logger.info.assert_called_once()
        event, = logger.info.call_args.args
        assert event == "operation_completed"
        assert logger.info.call_args.kwargs["algorithm"] == "dbscan"

    def test_performance_logger_failure(self):
        logger = Mock()

        with pytest.raises(ValueError):
            with PerformanceLogger("cluster", logger=logger):
                raise ValueError("bad input")

        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["error_type"] == "ValueError"

    def test_elapsed_time_before_start(self):
        assert PerformanceLogger("idle", logger=Mock()).elapsed_time == 0.0

    def test_timed(self):
        @timed(operation="double")
        def double(value):
            return value * 2

        assert double(21) == 42
        assert double.__name__ == "double"

    def test_log_exceptions_reraises(self):
        logger = Mock()

        with pytest.raises(KeyError):
            with log_exceptions(logger=logger, operation="load_points"):
                raise KeyError("x")

        assert logger.error.call_args.kwargs["operation"] == "load_points"

    def test_log_exceptions_without_reraise(self):
        logger = Mock()

        with log_exceptions(logger=logger, reraise=False):
            raise RuntimeError("ignored")

        logger.error.assert_called_once()
