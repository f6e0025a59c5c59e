"""
Line parser for Binance Futures strategy logs.

Log format:
    [2026-01-27 00:12:51.414][INFO][module] [AUDIT][SPREAD_MET][ETH] Message | key=value, key=value

Lines that do not match the outer [timestamp][LEVEL][module] grammar are
skipped, never raised on; mixed-quality logs are parsed best effort.
"""

import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from log_analyzer.models.event import EventCategory, LogEvent, LogLevel, PayloadValue
from log_analyzer.utils.config import ParserConfig

logger = logging.getLogger(__name__)


class LogParser:
    """
    Turns raw log text into LogEvent objects.

    Holds no state between lines other than the configured ticker allow-list
    and the skipped-line counter of the last parse_content call.
    """

    # [timestamp][level][module] rest
    LINE_PATTERN = re.compile(
        r"^\[(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}\.\d{3})\]\[(\w+)\]\[([^\]]+)\]\s*(.*)$"
    )

    # Up to three bracket tags: [LIFECYCLE][ETH] or [AUDIT][SUBCATEGORY][ASSET]
    TAG_PATTERN = re.compile(r"^\[(\w+)\](?:\[(\w+)\])?(?:\[(\w+)\])?\s*(.*)$", re.DOTALL)

    # key=value pairs separated by ", "; values may contain spaces
    KV_PATTERN = re.compile(r"(\w+)=([^,\s]+(?:\s+[^,=\s]+)*?)(?=,\s*\w+=|$)")

    NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self._known_assets = frozenset(self.config.known_assets)
        self.skipped_lines = 0

    def is_asset(self, tag: Optional[str]) -> bool:
        return bool(tag) and tag in self._known_assets

    def extract_asset_from_symbol(self, symbol: Optional[PayloadValue]) -> Optional[str]:
        """
        Derive an asset from a trading symbol (ETHUSDT -> ETH).

        Returns None when no quote suffix matches or the remainder is not a
        known ticker.
        """
        if not isinstance(symbol, str) or not symbol:
            return None
        for suffix in self.config.quote_suffixes:
            if symbol.endswith(suffix):
                asset = symbol[: -len(suffix)]
                if asset in self._known_assets:
                    return asset
        return None

    def parse_line(self, line: Optional[str]) -> Optional[LogEvent]:
        """
        Parse a single log line.

        Args:
            line: Raw log line

        Returns:
            LogEvent, or None for blank or unrecognized lines
        """
        if not line or not line.strip():
            return None

        line_match = self.LINE_PATTERN.match(line.rstrip("\r\n"))
        if not line_match:
            return None

        timestamp_str, level_tag, module, rest = line_match.groups()
        level = LogLevel.from_tag(level_tag)
        if level is None:
            return None
        try:
            timestamp = self.parse_timestamp(timestamp_str)
        except ValueError:
            return None

        category = None
        subcategory = None
        asset = None
        message = rest

        tag_match = self.TAG_PATTERN.match(rest)
        if tag_match:
            tag1, tag2, tag3, remaining = tag_match.groups()
            if tag1 == EventCategory.LIFECYCLE.value:
                category = EventCategory.LIFECYCLE
                if self.is_asset(tag2):
                    asset = tag2
                else:
                    subcategory = tag2
                    asset = tag3
                message = remaining
            elif tag1 == EventCategory.AUDIT.value:
                category = EventCategory.AUDIT
                subcategory = tag2
                asset = tag3
                message = remaining

        if "|" in message:
            message_part, data_part = message.split("|", 1)
            message = message_part.strip()
            data = self.parse_key_values(data_part)
        else:
            message = message.strip()
            data = self.parse_key_values(message)

        if not asset and "symbol" in data:
            asset = self.extract_asset_from_symbol(data["symbol"])

        return LogEvent(
            timestamp=timestamp,
            level=level,
            module=module,
            category=category,
            subcategory=subcategory,
            asset=asset,
            message=message,
            data=data,
        )

    @classmethod
    def parse_timestamp(cls, text: str) -> datetime:
        """
        Parse 'YYYY-MM-DD HH:MM:SS.mmm' as naive local time.

        Raises:
            ValueError: If the text is not a valid date-time
        """
        date_part, time_part = text.split()
        return datetime.strptime(f"{date_part} {time_part}", cls.TIMESTAMP_FORMAT)

    @classmethod
    def coerce_value(cls, raw: str) -> PayloadValue:
        """Type a raw payload value: number, boolean, else text."""
        value = raw.strip()
        if cls.NUMBER_PATTERN.match(value):
            if "." in value:
                return float(value)
            return int(value)
        if value == "true":
            return True
        if value == "false":
            return False
        return value

    @classmethod
    def parse_key_values(cls, text: Optional[str]) -> Dict[str, PayloadValue]:
        """Extract key=value pairs; tolerant of text with no pairs at all."""
        if not text:
            return {}

        data: Dict[str, PayloadValue] = {}
        for match in cls.KV_PATTERN.finditer(text.rstrip()):
            key, raw = match.groups()
            data[key] = cls.coerce_value(raw)
        return data

    def parse_lines(self, lines: Iterable[str]) -> List[LogEvent]:
        events = []
        skipped = 0
        for line in lines:
            event = self.parse_line(line)
            if event is None:
                if line.strip():
                    skipped += 1
                continue
            events.append(event)

        self.skipped_lines = skipped
        if skipped:
            logger.debug(f"Skipped {skipped} unrecognized log lines")
        return events

    def parse_content(self, content: str) -> List[LogEvent]:
        """
        Parse full log file content.

        Args:
            content: Complete log text

        Returns:
            Events in encounter order
        """
        return self.parse_lines(content.split("\n"))

    @staticmethod
    def extract_assets(events: Iterable[LogEvent]) -> List[str]:
        """Unique assets seen in events, sorted."""
        return sorted({event.asset for event in events if event.asset})
