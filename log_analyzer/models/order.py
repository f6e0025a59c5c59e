"""
Order detail rows for the order/fill tables
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .event import PayloadValue
from .session import SessionConfig
from .stats import SessionStats


class OrderDetailStatus(Enum):
    """Display status of an order row"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FILLED = "filled"
    PARTIAL = "partial"
    CANCELED = "canceled"
    UNKNOWN = "unknown"

    @property
    def text(self) -> str:
        return self.value.capitalize()


@dataclass
class OrderDetail:
    """
    One row of the order/fill table.

    A row stands for an acknowledged order or, in the per-session view, for a
    single fill increment of that order. ``accumulated`` is copied from the
    log as reported (running total across the session), never recomputed.
    """
    submit_time: datetime
    symbol: Optional[str] = None
    side: Optional[str] = None
    order_type: str = "LIMIT"
    quantity: Optional[PayloadValue] = None
    price: Optional[PayloadValue] = None
    status: OrderDetailStatus = OrderDetailStatus.UNKNOWN
    order_id: Optional[PayloadValue] = None
    latency: Optional[float] = None
    pair_id: Optional[PayloadValue] = None
    fill_time: Optional[datetime] = None
    filled_qty: float = 0.0
    cumulative_filled: float = 0.0
    accumulated: Optional[float] = None

    @property
    def sort_time(self) -> datetime:
        return self.fill_time or self.submit_time

    @property
    def submit_time_string(self) -> str:
        return self.submit_time.strftime("%H:%M:%S") if self.submit_time else ""

    @property
    def fill_time_string(self) -> str:
        return self.fill_time.strftime("%H:%M:%S") if self.fill_time else "-"

    @property
    def status_text(self) -> str:
        return self.status.text


@dataclass(frozen=True)
class SessionSummary:
    """Header shown above a session's order history."""
    asset: str
    start_time: datetime
    end_time: Optional[datetime]
    duration: str
    config: SessionConfig
    event_count: int


@dataclass
class SessionOrderHistory:
    """Per-session order rows together with the session's statistics."""
    session: SessionSummary
    stats: SessionStats
    orders: List[OrderDetail] = field(default_factory=list)
