"""
Unit tests for the logging setup (AnalyzerLogger, log_execution_time)
"""

import json
import logging
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from log_analyzer.core.exceptions import ConfigurationError
from log_analyzer.utils.config import LoggingConfig
from log_analyzer.utils.logger import EXPORT_LOGGER, AnalyzerLogger, log_execution_time


class TestAnalyzerLogger:
    """Test AnalyzerLogger class"""

    def teardown_method(self):
        """Clean up logging handlers after each test"""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers.clear()

    def test_log_directory_creation(self):
        """Verify log directory is created if it doesn't exist"""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / 'nested' / 'logs'

            analyzer_logger = AnalyzerLogger(LoggingConfig(log_level='INFO', log_dir=str(log_dir)))

            assert log_dir.is_dir()
            assert analyzer_logger.log_file == log_dir / 'analyzer.log'

    def test_handlers(self):
        """Verify console and rotating file handlers are installed"""
        with tempfile.TemporaryDirectory() as tmpdir:
            AnalyzerLogger(LoggingConfig(log_level='debug', log_dir=tmpdir))

            root_logger = logging.getLogger()
            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) == 2

            console, file_handler = root_logger.handlers
            assert console.level == logging.INFO
            assert isinstance(file_handler, RotatingFileHandler)
            assert file_handler.maxBytes == 5 * 1024 * 1024
            assert file_handler.backupCount == 3

    def test_repeated_setup_does_not_duplicate_handlers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = LoggingConfig(log_level='INFO', log_dir=tmpdir)
            AnalyzerLogger(config)
            AnalyzerLogger(config)

            assert len(logging.getLogger().handlers) == 2

    def test_log_export_writes_json_record(self):
        """Verify export records land in analyzer.log as JSON"""
        with tempfile.TemporaryDirectory() as tmpdir:
            analyzer_logger = AnalyzerLogger(LoggingConfig(log_level='INFO', log_dir=tmpdir))

            AnalyzerLogger.log_export('EXPORT_WRITTEN', {'path': 'out.json', 'filter': 'ETH'})

            lines = analyzer_logger.log_file.read_text(encoding='utf-8').splitlines()
            export_lines = [line for line in lines if EXPORT_LOGGER in line]
            assert len(export_lines) == 1
            entry = json.loads(export_lines[0].split(' | ', 3)[3])
            assert entry['action'] == 'EXPORT_WRITTEN'
            assert entry['path'] == 'out.json'
            assert entry['filter'] == 'ETH'
            assert 'timestamp' in entry

    def test_debug_records_filtered_at_info(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            analyzer_logger = AnalyzerLogger(LoggingConfig(log_level='INFO', log_dir=tmpdir))

            logging.getLogger('log_analyzer.test').debug('hidden detail')
            logging.getLogger('log_analyzer.test').info('visible detail')

            content = analyzer_logger.log_file.read_text(encoding='utf-8')
            assert 'visible detail' in content
            assert 'hidden detail' not in content

    def test_invalid_level_rejected_by_config(self):
        with pytest.raises(ConfigurationError):
            LoggingConfig(log_level='VERBOSE')


class TestLogExecutionTime:
    """Test log_execution_time context manager"""

    def test_logs_elapsed_time(self, caplog):
        caplog.set_level(logging.DEBUG, logger='log_analyzer.utils.logger')

        with log_execution_time('parse_content'):
            pass

        assert any('parse_content completed in' in r.getMessage() for r in caplog.records)

    def test_logs_even_on_exception(self, caplog):
        caplog.set_level(logging.DEBUG, logger='log_analyzer.utils.logger')

        with pytest.raises(ValueError):
            with log_execution_time('failing_operation'):
                raise ValueError("boom")

        assert any('failing_operation completed in' in r.getMessage() for r in caplog.records)
