"""
Statistics calculator for grouped strategy sessions.

Each session is reduced in a single pass. Order and pair correlation tables
live in a ReductionState owned by that pass and are threaded explicitly
through process_event; nothing is shared between passes.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple

from log_analyzer.models.event import LogEvent, PayloadValue
from log_analyzer.models.session import StrategySession
from log_analyzer.models.stats import SessionStats

logger = logging.getLogger(__name__)

USDT = "USDT"
USDC = "USDC"

# PAIR_LINK payload key -> settlement currency of that leg
PAIR_LEG_KEYS: Tuple[Tuple[str, str], ...] = (("usdt_order", USDT), ("usdc_order", USDC))


def settlement_currency(symbol: Optional[str]) -> Optional[str]:
    """USDT or USDC settlement currency of a symbol such as ETHUSDC."""
    if not symbol:
        return None
    if USDT in symbol:
        return USDT
    if USDC in symbol:
        return USDC
    return None


def first_number(event: LogEvent, *keys: str) -> Optional[float]:
    """First non-zero numeric payload value among keys, in order."""
    for key in keys:
        value = event.get_number(key)
        if value:
            return value
    return None


def response_outcome(event: LogEvent) -> Optional[str]:
    """Classify an ORDER_RESPONSE as "accepted", "rejected" or None."""
    status = event.get_text("status")
    if "Order accepted" in event.message or status in ("accepted", "NEW"):
        return "accepted"
    if "Order rejected" in event.message or status in ("rejected", "REJECTED"):
        return "rejected"
    return None


def is_partial_fill(event: LogEvent) -> bool:
    return "Partial fill" in event.message or event.get_text("fill_type") == "partial"


def is_gtx_rejection(event: LogEvent) -> bool:
    error = event.get_text("error")
    return bool(error and "GTX" in error) or "GTX" in event.message


@dataclass
class TrackedOrder:
    """Order table entry keyed by order id"""
    symbol: Optional[str] = None
    side: Optional[str] = None
    quantity: Optional[PayloadValue] = None
    price: Optional[PayloadValue] = None
    status: str = "pending"
    pair_id: Optional[PayloadValue] = None


@dataclass
class PairState:
    """Fill state of the two legs of an order pair"""
    usdt_filled: bool = False
    usdc_filled: bool = False

    def mark(self, currency: str) -> None:
        if currency == USDT:
            self.usdt_filled = True
        elif currency == USDC:
            self.usdc_filled = True

    @property
    def succeeded(self) -> bool:
        return self.usdt_filled and self.usdc_filled


@dataclass
class ReductionState:
    """
    Correlation tables for one reduction pass.

    Attributes:
        orders: order id -> TrackedOrder (registered by ORDER_SUBMIT)
        pairs: pair id -> PairState
        links: order id -> (pair id, leg currency) from PAIR_LINK payloads
        filled_orders: order id -> settlement currency of fills seen so far
    """
    orders: Dict[PayloadValue, TrackedOrder] = field(default_factory=dict)
    pairs: Dict[PayloadValue, PairState] = field(default_factory=dict)
    links: Dict[PayloadValue, Tuple[PayloadValue, str]] = field(default_factory=dict)
    filled_orders: Dict[PayloadValue, Optional[str]] = field(default_factory=dict)

    def ensure_pair(self, pair_id: PayloadValue) -> PairState:
        if pair_id not in self.pairs:
            self.pairs[pair_id] = PairState()
        return self.pairs[pair_id]


class StatsCalculator:
    """Computes SessionStats for single sessions and session sets"""

    @classmethod
    def calculate_session_stats(cls, session: StrategySession) -> SessionStats:
        """
        Calculate statistics for a single session.

        Args:
            session: Grouped strategy session

        Returns:
            Freshly built SessionStats
        """
        stats = SessionStats(runtime_ms=session.duration_ms)
        state = ReductionState()

        for event in session.events:
            cls.process_event(event, stats, state)

        for pair in state.pairs.values():
            stats.order_pairs.attempted += 1
            if pair.succeeded:
                stats.order_pairs.succeeded += 1

        logger.debug(
            f"{session.asset} session stats: {len(session.events)} events, "
            f"{stats.orders.total} orders, {stats.fills.total} fills"
        )
        return stats

    @classmethod
    def calculate_aggregate_stats(cls, sessions: Iterable[StrategySession]) -> SessionStats:
        """Merge per-session statistics across sessions."""
        return reduce(
            lambda total, session: total.merge(cls.calculate_session_stats(session)),
            sessions,
            SessionStats(),
        )

    @classmethod
    def process_event(cls, event: LogEvent, stats: SessionStats, state: ReductionState) -> None:
        """
        Apply one event to stats, updating the pass's correlation tables.

        Untagged events (no LIFECYCLE/AUDIT category) never count, not even
        at ERROR level.
        """
        if event.category is None:
            return

        subcategory = event.subcategory

        if subcategory == "SPREAD_MET":
            stats.spread_triggers += 1
        elif subcategory == "ORDER_SUBMIT":
            cls._process_order_submit(event, stats, state)
        elif subcategory == "ORDER_RESPONSE":
            cls._process_order_response(event, stats, state)
        elif subcategory == "ORDER_FILL":
            cls._process_order_fill(event, stats, state)
        elif subcategory in ("PARALLEL_ORDER", "PAIR_LINK"):
            cls._process_pair_link(event, state)
        elif subcategory == "FAST_CHASE":
            cls._process_fast_chase(event, stats)
        elif subcategory == "ORDER_STATE":
            if "GTX rejected" in event.message:
                stats.errors.gtx_rejections += 1
        elif subcategory == "ORDER_TIMEOUT":
            stats.errors.timeouts += 1
        elif subcategory in ("BALANCE", "ORDER_CANCEL"):
            pass
        elif event.is_error:
            # Case-sensitive: "Timeout" falls through to other
            if "timeout" in event.message:
                stats.errors.timeouts += 1
            elif "API" in event.message:
                stats.errors.api_errors += 1
            else:
                stats.errors.other += 1

    @staticmethod
    def _process_order_submit(event: LogEvent, stats: SessionStats, state: ReductionState) -> None:
        stats.orders.total += 1
        order_id = event.data.get("order_id")
        if order_id is None:
            return
        state.orders[order_id] = TrackedOrder(
            symbol=event.get_text("symbol"),
            side=event.get_text("side"),
            quantity=event.data.get("qty"),
            price=event.data.get("price"),
            pair_id=event.data.get("pair_id"),
        )

    @staticmethod
    def _process_order_response(event: LogEvent, stats: SessionStats, state: ReductionState) -> None:
        latency = event.get_number("latency_ms")
        if latency is not None:
            stats.orders.latencies.append(latency)

        outcome = response_outcome(event)

        order_id = event.data.get("order_id")
        order = state.orders.get(order_id) if order_id is not None else None

        if outcome == "accepted":
            stats.orders.accepted += 1
            if order:
                order.status = "accepted"
        elif outcome == "rejected":
            stats.orders.rejected += 1
            if order:
                order.status = "rejected"
            if is_gtx_rejection(event):
                stats.errors.gtx_rejections += 1

    @staticmethod
    def _process_order_fill(event: LogEvent, stats: SessionStats, state: ReductionState) -> None:
        fills = stats.fills
        fills.total += 1

        partial = is_partial_fill(event)
        if partial:
            fills.partial += 1
        else:
            fills.full += 1

        quantity = first_number(event, "last_filled", "filled", "qty") or 0.0
        fills.total_qty += quantity

        # Partial fills carry symbol=..., full fills say "USDT order filled"
        symbol = event.get_text("symbol")
        if not symbol:
            if "USDT order filled" in event.message:
                symbol = USDT
            elif "USDC order filled" in event.message:
                symbol = USDC
        currency = settlement_currency(symbol)
        if currency == USDT:
            fills.usdt_qty += quantity
        elif currency == USDC:
            fills.usdc_qty += quantity

        price = first_number(event, "price", "last_price", "fill_price")
        if price is not None:
            fills.prices.append(price)

        order_id = event.data.get("order_id")
        if order_id is None:
            return

        order = state.orders.get(order_id)
        link = state.links.get(order_id)
        leg = None
        pair_id = None
        if order:
            order.status = "partial" if partial else "filled"
            leg = settlement_currency(order.symbol)
            pair_id = order.pair_id
        if link:
            pair_id = pair_id if pair_id is not None else link[0]
            leg = leg or link[1]
        leg = leg or currency
        if pair_id is None:
            pair_id = event.data.get("pair_id")

        state.filled_orders[order_id] = leg
        if pair_id is not None and leg:
            state.ensure_pair(pair_id).mark(leg)

    @staticmethod
    def _process_pair_link(event: LogEvent, state: ReductionState) -> None:
        pair_id = event.data.get("pair_id")
        if pair_id is None:
            return
        pair = state.ensure_pair(pair_id)

        for key, currency in PAIR_LEG_KEYS:
            order_id = event.data.get(key)
            if order_id is None:
                continue
            state.links[order_id] = (pair_id, currency)
            order = state.orders.get(order_id)
            if order and order.pair_id is None:
                order.pair_id = pair_id
            # Link logged after the fill
            if order_id in state.filled_orders:
                pair.mark(state.filled_orders[order_id] or currency)

    @staticmethod
    def _process_fast_chase(event: LogEvent, stats: SessionStats) -> None:
        chase = stats.fast_chase
        message = event.message.lower()

        if "entering" in message:
            chase.events += 1
        elif "completed successfully" in message:
            chase.successes += 1
            retries = event.get_number("retry_count")
            if retries is not None:
                chase.retries.append(retries)
        elif "fallback" in message:
            chase.record_fallback(event.get_text("reason") or "unknown")
