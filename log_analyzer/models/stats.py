"""
Session statistics data structures.

Counters and raw samples are stored; every rate and average is derived on
demand from them so merged or re-computed stats can never go stale.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List


def _percent(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def _mean(samples: List[float]) -> float:
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


@dataclass
class OrderPairStats:
    """USDT/USDC order pairs attempted and fully filled."""

    attempted: int = 0
    succeeded: int = 0

    @property
    def success_rate(self) -> float:
        return _percent(self.succeeded, self.attempted)

    def merge(self, other: "OrderPairStats") -> "OrderPairStats":
        return OrderPairStats(
            attempted=self.attempted + other.attempted,
            succeeded=self.succeeded + other.succeeded,
        )


@dataclass
class OrderStats:
    """Order submission outcomes and response latency samples (ms)."""

    total: int = 0
    accepted: int = 0
    rejected: int = 0
    latencies: List[float] = field(default_factory=list)

    @property
    def avg_latency(self) -> int:
        """Mean latency rounded half up to whole milliseconds."""
        if not self.latencies:
            return 0
        return math.floor(_mean(self.latencies) + 0.5)

    @property
    def accept_rate(self) -> float:
        return _percent(self.accepted, self.total)

    def merge(self, other: "OrderStats") -> "OrderStats":
        return OrderStats(
            total=self.total + other.total,
            accepted=self.accepted + other.accepted,
            rejected=self.rejected + other.rejected,
            latencies=self.latencies + other.latencies,
        )


@dataclass
class FillStats:
    """Fill counts, quantities by settlement currency and price samples."""

    total: int = 0
    partial: int = 0
    full: int = 0
    total_qty: float = 0.0
    usdt_qty: float = 0.0
    usdc_qty: float = 0.0
    prices: List[float] = field(default_factory=list)

    @property
    def avg_price(self) -> float:
        return _mean(self.prices)

    def merge(self, other: "FillStats") -> "FillStats":
        return FillStats(
            total=self.total + other.total,
            partial=self.partial + other.partial,
            full=self.full + other.full,
            total_qty=self.total_qty + other.total_qty,
            usdt_qty=self.usdt_qty + other.usdt_qty,
            usdc_qty=self.usdc_qty + other.usdc_qty,
            prices=self.prices + other.prices,
        )


@dataclass
class FastChaseStats:
    """Fast chase entries, successes, retry samples and fallback reasons."""

    events: int = 0
    successes: int = 0
    retries: List[float] = field(default_factory=list)
    fallback_reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        return _percent(self.successes, self.events)

    @property
    def avg_retries(self) -> float:
        return _mean(self.retries)

    def record_fallback(self, reason: str) -> None:
        self.fallback_reasons[reason] = self.fallback_reasons.get(reason, 0) + 1

    def merge(self, other: "FastChaseStats") -> "FastChaseStats":
        reasons = dict(self.fallback_reasons)
        for reason, count in other.fallback_reasons.items():
            reasons[reason] = reasons.get(reason, 0) + count
        return FastChaseStats(
            events=self.events + other.events,
            successes=self.successes + other.successes,
            retries=self.retries + other.retries,
            fallback_reasons=reasons,
        )


@dataclass
class ErrorStats:
    """
    Categorized error counters.

    GTX rejections are counted both from ORDER_RESPONSE rejections and from
    ORDER_STATE "GTX rejected" events, so one logical rejection can count twice.
    """

    gtx_rejections: int = 0
    api_errors: int = 0
    timeouts: int = 0
    other: int = 0

    def merge(self, other: "ErrorStats") -> "ErrorStats":
        return ErrorStats(
            gtx_rejections=self.gtx_rejections + other.gtx_rejections,
            api_errors=self.api_errors + other.api_errors,
            timeouts=self.timeouts + other.timeouts,
            other=self.other + other.other,
        )

    def to_dict(self) -> dict:
        return {
            "gtxRejections": self.gtx_rejections,
            "apiErrors": self.api_errors,
            "timeouts": self.timeouts,
            "other": self.other,
        }


@dataclass
class SessionStats:
    """
    Derived execution statistics for one session or a set of sessions.

    Aggregation over several sessions is SessionStats.merge applied in turn:
    counters add, sample lists concatenate, fallback reasons merge by key.
    """

    runtime_ms: int = 0
    spread_triggers: int = 0
    order_pairs: OrderPairStats = field(default_factory=OrderPairStats)
    orders: OrderStats = field(default_factory=OrderStats)
    fills: FillStats = field(default_factory=FillStats)
    fast_chase: FastChaseStats = field(default_factory=FastChaseStats)
    errors: ErrorStats = field(default_factory=ErrorStats)

    def merge(self, other: "SessionStats") -> "SessionStats":
        return SessionStats(
            runtime_ms=self.runtime_ms + other.runtime_ms,
            spread_triggers=self.spread_triggers + other.spread_triggers,
            order_pairs=self.order_pairs.merge(other.order_pairs),
            orders=self.orders.merge(other.orders),
            fills=self.fills.merge(other.fills),
            fast_chase=self.fast_chase.merge(other.fast_chase),
            errors=self.errors.merge(other.errors),
        )
