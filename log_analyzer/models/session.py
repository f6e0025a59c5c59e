"""
Strategy session model
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Mapping, Optional

from .event import LogEvent, PayloadValue


@dataclass(frozen=True)
class SessionConfig:
    """Strategy parameters captured from the start marker payload."""

    qty: Optional[PayloadValue] = None
    direction: Optional[PayloadValue] = None
    spread_threshold: Optional[PayloadValue] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, PayloadValue]) -> "SessionConfig":
        return cls(
            qty=data.get("qty"),
            direction=data.get("direction"),
            spread_threshold=data.get("spread_threshold"),
        )

    def to_dict(self) -> dict:
        return {
            "qty": self.qty,
            "direction": self.direction,
            "spreadThreshold": self.spread_threshold,
        }


def format_duration(ms: float) -> str:
    """Format milliseconds as 1h2m3s / 2m3s / 3s."""
    seconds = int(ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h{minutes % 60}m{seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m{seconds % 60}s"
    return f"{seconds}s"


@dataclass
class StrategySession:
    """
    One start-to-stop run of the strategy for a single asset.

    Events keep encounter order. end_time stays None until a stop marker
    is seen, in which case the session is ongoing or the log was truncated.
    """

    asset: str
    start_time: datetime
    config: SessionConfig = field(default_factory=SessionConfig)
    end_time: Optional[datetime] = None
    events: List[LogEvent] = field(default_factory=list)

    def add_event(self, event: LogEvent) -> None:
        self.events.append(event)

    def close(self, event: LogEvent) -> None:
        """Finalize the session on a stop marker."""
        self.end_time = event.timestamp
        self.events.append(event)

    @property
    def is_ongoing(self) -> bool:
        return self.end_time is None

    @property
    def effective_end(self) -> datetime:
        """Stop marker time, else last event time, else start time."""
        if self.end_time is not None:
            return self.end_time
        if self.events:
            return self.events[-1].timestamp
        return self.start_time

    @property
    def duration(self) -> timedelta:
        return self.effective_end - self.start_time

    @property
    def duration_ms(self) -> int:
        return int(self.duration / timedelta(milliseconds=1))

    @property
    def duration_string(self) -> str:
        return format_duration(self.duration_ms)

    @property
    def event_count(self) -> int:
        return len(self.events)
