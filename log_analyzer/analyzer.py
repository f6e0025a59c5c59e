"""
Analysis facade: raw log text in, structured results out.

Every analyze() call builds a fresh, independent result tree; nothing from a
previous result is reused or mutated.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple, Union

from log_analyzer.core.exceptions import InvalidInputError, LogFileError
from log_analyzer.models.event import LogEvent
from log_analyzer.models.order import OrderDetail, SessionOrderHistory
from log_analyzer.models.session import StrategySession
from log_analyzer.models.stats import SessionStats
from log_analyzer.parsing.line_parser import LogParser
from log_analyzer.parsing.session_grouper import SessionGrouper
from log_analyzer.reporting.export import FileInfo
from log_analyzer.reporting.formatting import format_file_size
from log_analyzer.stats.calculator import StatsCalculator
from log_analyzer.stats.order_details import OrderDetailExtractor
from log_analyzer.utils.config import ParserConfig
from log_analyzer.utils.logger import log_execution_time

logger = logging.getLogger(__name__)

ALL_ASSETS = "all"


@dataclass
class AnalysisResult:
    """
    Parsed events and sessions of one log, with derived views.

    Attributes:
        events: All recognized events in encounter order
        sessions: Sessions in the order they were opened
        total_lines: Non-blank input lines
        skipped_lines: Non-blank lines that did not parse
        dropped_events: Events the grouper could not attribute to a session
    """

    events: List[LogEvent] = field(default_factory=list)
    sessions: List[StrategySession] = field(default_factory=list)
    total_lines: int = 0
    skipped_lines: int = 0
    dropped_events: int = 0

    @property
    def assets(self) -> List[str]:
        return LogParser.extract_assets(self.events)

    def filter_sessions(self, asset: Optional[str] = ALL_ASSETS) -> List[StrategySession]:
        """Sessions for one asset, or every session for 'all' / None."""
        if asset is None or asset == ALL_ASSETS:
            return list(self.sessions)
        return [session for session in self.sessions if session.asset == asset]

    def stats(self, asset: Optional[str] = ALL_ASSETS) -> Optional[SessionStats]:
        """Aggregate statistics over the filtered sessions; None when there are none."""
        sessions = self.filter_sessions(asset)
        if not sessions:
            return None
        return StatsCalculator.calculate_aggregate_stats(sessions)

    def order_details(self, asset: Optional[str] = ALL_ASSETS) -> List[OrderDetail]:
        return OrderDetailExtractor.extract_order_details(self.filter_sessions(asset))

    def orders_by_session(self, asset: Optional[str] = ALL_ASSETS) -> List[SessionOrderHistory]:
        return OrderDetailExtractor.extract_orders_by_session(self.filter_sessions(asset))


class LogAnalyzer:
    """
    Runs the parse -> group pipeline over one complete log.

    Usage:
        analyzer = LogAnalyzer()
        file_info, content = analyzer.load_file("logs/bot.log")
        result = analyzer.analyze(content)
        stats = result.stats("ETH")
    """

    def __init__(self, parser_config: Optional[ParserConfig] = None):
        self.parser_config = parser_config or ParserConfig()

    def analyze(self, content: Union[str, bytes]) -> AnalysisResult:
        """
        Parse log content and group it into sessions.

        Args:
            content: Complete log text (bytes are decoded as UTF-8)

        Returns:
            New AnalysisResult

        Raises:
            InvalidInputError: If content is None or not text/bytes
        """
        if content is None:
            raise InvalidInputError("Log content is required")
        if isinstance(content, (bytes, bytearray)):
            content = bytes(content).decode("utf-8", errors="replace")
        if not isinstance(content, str):
            raise InvalidInputError(
                f"Log content must be str or bytes, got {type(content).__name__}"
            )

        parser = LogParser(self.parser_config)
        grouper = SessionGrouper()

        with log_execution_time("parse_content"):
            events = parser.parse_content(content)
        with log_execution_time("group_sessions"):
            sessions = grouper.group(events)

        result = AnalysisResult(
            events=events,
            sessions=sessions,
            total_lines=sum(1 for line in content.split("\n") if line.strip()),
            skipped_lines=parser.skipped_lines,
            dropped_events=grouper.dropped_events,
        )
        logger.info(
            f"Parsed {len(events)} events into {len(sessions)} sessions "
            f"({result.skipped_lines} lines skipped)"
        )
        return result

    @staticmethod
    def load_file(path: Union[str, Path]) -> Tuple[FileInfo, str]:
        """
        Read a log file and describe it.

        Raises:
            LogFileError: If the file cannot be read
        """
        file_path = Path(path)
        try:
            raw = file_path.read_bytes()
            stat = file_path.stat()
        except OSError as e:
            raise LogFileError(f"Failed to load file: {e}") from e

        file_info = FileInfo(
            name=file_path.name,
            size=format_file_size(stat.st_size),
            last_modified=datetime.fromtimestamp(stat.st_mtime).date().isoformat(),
        )
        return file_info, raw.decode("utf-8", errors="replace")

    def analyze_file(self, path: Union[str, Path]) -> Tuple[FileInfo, AnalysisResult]:
        file_info, content = self.load_file(path)
        return file_info, self.analyze(content)
