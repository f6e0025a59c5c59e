"""
Groups the parsed event stream into per-asset strategy sessions.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from log_analyzer.models.event import EventCategory, LogEvent
from log_analyzer.models.session import SessionConfig, StrategySession

logger = logging.getLogger(__name__)


class SessionGrouper:
    """
    Partitions events by asset into sessions bounded by lifecycle markers.

    Events are consumed in encounter order. Asset-less events are attached
    only when exactly one session is open; with zero or several open
    sessions they are dropped, since attribution would be a guess.
    """

    START_MARKERS: Tuple[str, ...] = ("start_strategy called",)
    STOP_MARKERS: Tuple[str, ...] = (
        "StrategyExecutorTask::run completed",
        "stop_strategy completed",
    )

    def __init__(self):
        self.dropped_events = 0

    @classmethod
    def is_start_marker(cls, event: LogEvent) -> bool:
        return (
            event.category is EventCategory.LIFECYCLE
            and bool(event.asset)
            and any(marker in event.message for marker in cls.START_MARKERS)
        )

    @classmethod
    def is_stop_marker(cls, event: LogEvent) -> bool:
        return (
            event.category is EventCategory.LIFECYCLE
            and bool(event.asset)
            and any(marker in event.message for marker in cls.STOP_MARKERS)
        )

    def group(self, events: Iterable[LogEvent]) -> List[StrategySession]:
        """
        Group events into sessions.

        Args:
            events: Parsed events in encounter order

        Returns:
            Sessions in the order they were opened
        """
        sessions: List[StrategySession] = []
        active: Dict[str, StrategySession] = {}
        dropped = 0

        for event in events:
            if self.is_start_marker(event):
                # A new start replaces any session still open for the asset
                session = StrategySession(
                    asset=event.asset,
                    start_time=event.timestamp,
                    config=SessionConfig.from_payload(event.data),
                )
                session.add_event(event)
                active[event.asset] = session
                sessions.append(session)
                continue

            if self.is_stop_marker(event):
                session = active.pop(event.asset, None)
                if session is not None:
                    session.close(event)
                else:
                    dropped += 1
                continue

            if event.asset:
                session = active.get(event.asset)
                if session is None:
                    # Log started mid-session: open an orphan session
                    session = StrategySession(asset=event.asset, start_time=event.timestamp)
                    active[event.asset] = session
                    sessions.append(session)
                session.add_event(event)
            elif len(active) == 1:
                next(iter(active.values())).add_event(event)
            else:
                dropped += 1

        self.dropped_events = dropped
        if dropped:
            logger.debug(f"Dropped {dropped} events without session attribution")
        logger.debug(f"Grouped events into {len(sessions)} sessions")
        return sessions
