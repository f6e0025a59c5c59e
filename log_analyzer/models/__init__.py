"""
Data models package
"""

from .event import EventCategory, LogEvent, LogLevel, PayloadValue
from .order import OrderDetail, OrderDetailStatus, SessionOrderHistory, SessionSummary
from .session import SessionConfig, StrategySession
from .stats import (
    ErrorStats,
    FastChaseStats,
    FillStats,
    OrderPairStats,
    OrderStats,
    SessionStats,
)

__all__ = [
    "LogEvent",
    "LogLevel",
    "EventCategory",
    "PayloadValue",
    "StrategySession",
    "SessionConfig",
    "SessionStats",
    "OrderPairStats",
    "OrderStats",
    "FillStats",
    "FastChaseStats",
    "ErrorStats",
    "OrderDetail",
    "OrderDetailStatus",
    "SessionOrderHistory",
    "SessionSummary",
]
