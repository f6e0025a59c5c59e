"""
Logging setup for analyzer runs
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator

from log_analyzer.utils.config import LoggingConfig

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'

EXPORT_LOGGER = 'log_analyzer.exports'


class AnalyzerLogger:
    """
    Root logger setup for one CLI run.

    Console output goes to stderr (INFO+) so the printed report on stdout
    stays clean; everything at the configured level also goes to
    <log_dir>/analyzer.log, including JSON export records.
    """

    LOG_FILE = 'analyzer.log'

    def __init__(self, config: LoggingConfig):
        """
        Raises:
            OSError: If the log directory cannot be created
        """
        self.log_level = config.log_level.upper()
        self.log_dir = Path(config.log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_logging()

    @property
    def log_file(self) -> Path:
        return self.log_dir / self.LOG_FILE

    def _setup_logging(self) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self.log_level))

        # Repeated setup must not stack handlers
        root_logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=5*1024*1024,  # 5MB
            backupCount=3,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    @staticmethod
    def log_export(action: str, data: dict) -> None:
        """
        Record an export as one JSON object on the export logger

        Example:
            AnalyzerLogger.log_export('EXPORT_WRITTEN', {'path': 'analysis.json', 'filter': 'ETH'})
        """
        entry = {'timestamp': datetime.now().isoformat(), 'action': action, **data}
        logging.getLogger(EXPORT_LOGGER).info(json.dumps(entry))


@contextmanager
def log_execution_time(operation: str) -> Generator[None, None, None]:
    """Log '<operation> completed in N.NNNs' at DEBUG, even if the block raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logging.getLogger(__name__).debug(f"{operation} completed in {elapsed:.3f}s")
