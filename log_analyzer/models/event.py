"""
Parsed log event model
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

# Payload values are coerced per key: numbers, booleans or raw text
PayloadValue = Union[int, float, bool, str]


class LogLevel(Enum):
    """Log levels emitted by the trading bot."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["LogLevel"]:
        """Map a raw level tag to a LogLevel (WARNING is accepted as WARN)."""
        normalized = tag.upper()
        if normalized == "WARNING":
            normalized = "WARN"
        try:
            return cls(normalized)
        except ValueError:
            return None


class EventCategory(Enum):
    """Bracket-tag categories recognized in the message prefix."""

    LIFECYCLE = "LIFECYCLE"
    AUDIT = "AUDIT"


@dataclass(frozen=True)
class LogEvent:
    """
    One parsed log line.

    Attributes:
        timestamp: Naive local time with millisecond precision
        level: INFO / WARN / ERROR
        module: Emitting module name from the third bracket
        category: LIFECYCLE, AUDIT or None for untagged lines
        subcategory: Audit tag such as ORDER_FILL or SPREAD_MET
        asset: Ticker such as ETH (from tags or back-filled from symbol)
        message: Free text with tags and payload stripped
        data: Read-only key/value payload (compared, not hashed)
    """

    timestamp: datetime
    level: LogLevel
    module: str
    category: Optional[EventCategory] = None
    subcategory: Optional[str] = None
    asset: Optional[str] = None
    message: str = ""
    data: Mapping[str, PayloadValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def is_error(self) -> bool:
        return self.level is LogLevel.ERROR

    @property
    def time_string(self) -> str:
        """Formatted time of day (HH:MM:SS.mmm)."""
        return self.timestamp.strftime("%H:%M:%S.") + f"{self.timestamp.microsecond // 1000:03d}"

    def get_text(self, key: str) -> Optional[str]:
        """Payload value as text, or None when the key is absent."""
        value = self.data.get(key)
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def get_number(self, key: str) -> Optional[float]:
        """Payload value as a number, or None when absent or not numeric."""
        value = self.data.get(key)
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value
        return None
