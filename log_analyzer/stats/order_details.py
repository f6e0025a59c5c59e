"""
Order/fill detail extraction for the order tables.

ORDER_SUBMIT events are matched to ORDER_RESPONSE events through a FIFO
queue per symbol: the oldest pending submission for the response's symbol
wins. Interleaved same-symbol orders can therefore be paired with the wrong
submission; rows reflect exactly that matching.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, Iterable, List, Optional

from log_analyzer.models.event import LogEvent, PayloadValue
from log_analyzer.models.order import (
    OrderDetail,
    OrderDetailStatus,
    SessionOrderHistory,
    SessionSummary,
)
from log_analyzer.models.session import StrategySession
from log_analyzer.stats.calculator import (
    PAIR_LEG_KEYS,
    StatsCalculator,
    first_number,
    is_partial_fill,
    response_outcome,
)

logger = logging.getLogger(__name__)

CANCEL_MARKERS = ("canceled", "cancelled")


@dataclass
class PendingSubmit:
    """ORDER_SUBMIT waiting for its ORDER_RESPONSE"""
    timestamp: datetime
    symbol: Optional[str]
    side: Optional[str]
    order_type: str
    quantity: Optional[PayloadValue]
    price: Optional[PayloadValue]


class SubmitQueue:
    """Pending submissions, first in first out per symbol"""

    def __init__(self):
        self._pending: Dict[Optional[str], Deque[PendingSubmit]] = defaultdict(deque)

    def push(self, event: LogEvent) -> None:
        symbol = event.get_text("symbol")
        self._pending[symbol].append(
            PendingSubmit(
                timestamp=event.timestamp,
                symbol=symbol,
                side=event.get_text("side"),
                order_type=event.get_text("type") or "LIMIT",
                quantity=event.data.get("qty"),
                price=event.data.get("price"),
            )
        )

    def pop(self, symbol: Optional[str]) -> Optional[PendingSubmit]:
        queue = self._pending.get(symbol)
        if not queue:
            return None
        return queue.popleft()


def _response_status(event: LogEvent) -> OrderDetailStatus:
    outcome = response_outcome(event)
    if outcome is None:
        return OrderDetailStatus.UNKNOWN
    return OrderDetailStatus(outcome)


def _order_row(event: LogEvent, submit: Optional[PendingSubmit]) -> OrderDetail:
    """Row for an ORDER_RESPONSE, enriched with its matched submission."""
    return OrderDetail(
        submit_time=submit.timestamp if submit else event.timestamp,
        symbol=event.get_text("symbol"),
        side=submit.side if submit else None,
        order_type=submit.order_type if submit else "LIMIT",
        quantity=submit.quantity if submit else None,
        price=submit.price if submit else None,
        status=_response_status(event),
        order_id=event.data.get("order_id"),
        latency=event.get_number("latency_ms"),
    )


def _state_change(event: LogEvent) -> Optional[OrderDetailStatus]:
    """Status implied by an ORDER_STATE message, if any."""
    if "GTX rejected" in event.message:
        return OrderDetailStatus.REJECTED
    message = event.message.lower()
    if any(marker in message for marker in CANCEL_MARKERS):
        return OrderDetailStatus.CANCELED
    return None


class OrderDetailExtractor:
    """Builds display rows from session events"""

    @staticmethod
    def extract_order_details(sessions: Iterable[StrategySession]) -> List[OrderDetail]:
        """
        Flat order list across sessions, one row per order id.

        Fills, state changes and pair links mutate the order's row in place.

        Args:
            sessions: Sessions to scan, in order

        Returns:
            Rows sorted by submit time
        """
        rows: List[OrderDetail] = []
        by_id: Dict[PayloadValue, OrderDetail] = {}
        pair_links: Dict[PayloadValue, PayloadValue] = {}
        submits = SubmitQueue()

        for session in sessions:
            for event in session.events:
                subcategory = event.subcategory
                order_id = event.data.get("order_id")

                if subcategory == "ORDER_SUBMIT":
                    submits.push(event)

                elif subcategory == "ORDER_RESPONSE":
                    if order_id is None:
                        continue
                    detail = _order_row(event, submits.pop(event.get_text("symbol")))
                    detail.pair_id = pair_links.get(order_id)
                    rows.append(detail)
                    by_id[order_id] = detail

                elif subcategory == "ORDER_FILL":
                    detail = by_id.get(order_id) if order_id is not None else None
                    if detail is None:
                        continue
                    detail.fill_time = event.timestamp
                    last_filled = event.get_number("last_filled")
                    if last_filled is not None:
                        detail.filled_qty = last_filled
                    cumulative = first_number(event, "cumulative_filled", "total_filled")
                    if cumulative is not None:
                        detail.cumulative_filled = cumulative
                    accumulated = event.get_number("accumulated")
                    if accumulated is not None:
                        detail.accumulated = accumulated
                    detail.status = (
                        OrderDetailStatus.PARTIAL if is_partial_fill(event) else OrderDetailStatus.FILLED
                    )

                elif subcategory == "ORDER_STATE":
                    detail = by_id.get(order_id) if order_id is not None else None
                    new_status = _state_change(event)
                    if detail and new_status and detail.status is OrderDetailStatus.ACCEPTED:
                        detail.status = new_status

                elif subcategory == "PAIR_LINK":
                    pair_id = event.data.get("pair_id")
                    for key, _ in PAIR_LEG_KEYS:
                        leg_id = event.data.get(key)
                        if leg_id is None:
                            continue
                        pair_links[leg_id] = pair_id
                        if leg_id in by_id:
                            by_id[leg_id].pair_id = pair_id

        rows.sort(key=lambda row: row.submit_time)
        return rows

    @classmethod
    def extract_orders_by_session(cls, sessions: Iterable[StrategySession]) -> List[SessionOrderHistory]:
        """
        Order history per session, one row per fill.

        A fill replaces the order's "accepted" row, so an order yields zero,
        one or many fill rows.
        """
        histories = []
        for session in sessions:
            rows = cls._session_rows(session)
            histories.append(
                SessionOrderHistory(
                    session=SessionSummary(
                        asset=session.asset,
                        start_time=session.start_time,
                        end_time=session.end_time,
                        duration=session.duration_string,
                        config=session.config,
                        event_count=session.event_count,
                    ),
                    stats=StatsCalculator.calculate_session_stats(session),
                    orders=rows,
                )
            )
        return histories

    @staticmethod
    def _session_rows(session: StrategySession) -> List[OrderDetail]:
        rows: List[OrderDetail] = []
        base_orders: Dict[PayloadValue, OrderDetail] = {}
        pair_links: Dict[PayloadValue, PayloadValue] = {}
        submits = SubmitQueue()

        for event in session.events:
            subcategory = event.subcategory
            order_id = event.data.get("order_id")

            if subcategory == "ORDER_SUBMIT":
                submits.push(event)

            elif subcategory == "ORDER_RESPONSE":
                if order_id is None:
                    continue
                detail = _order_row(event, submits.pop(event.get_text("symbol")))
                detail.pair_id = pair_links.get(order_id)
                base_orders[order_id] = detail
                rows.append(detail)

            elif subcategory == "ORDER_FILL":
                base = base_orders.get(order_id) if order_id is not None else None
                price = first_number(event, "last_price", "price")
                fill_row = OrderDetail(
                    submit_time=base.submit_time if base else event.timestamp,
                    symbol=event.get_text("symbol") or (base.symbol if base else None),
                    side=base.side if base else None,
                    order_type=base.order_type if base else "LIMIT",
                    quantity=base.quantity if base else None,
                    price=price if price is not None else (base.price if base else None),
                    status=OrderDetailStatus.PARTIAL if is_partial_fill(event) else OrderDetailStatus.FILLED,
                    order_id=order_id,
                    latency=base.latency if base else None,
                    pair_id=pair_links.get(order_id) if order_id is not None else None,
                    fill_time=event.timestamp,
                    filled_qty=first_number(event, "last_filled") or 0.0,
                    cumulative_filled=first_number(event, "cumulative_filled", "total_filled") or 0.0,
                    accumulated=first_number(event, "accumulated") or 0.0,
                )
                rows.append(fill_row)

                # The fill supersedes the order's "accepted" row
                for index, row in enumerate(rows):
                    if row.order_id == order_id and row.status is OrderDetailStatus.ACCEPTED:
                        del rows[index]
                        break

            elif subcategory == "ORDER_STATE":
                if order_id is None or order_id not in base_orders:
                    continue
                new_status = _state_change(event)
                if new_status is None:
                    continue
                for row in rows:
                    if row.order_id == order_id and row.status is OrderDetailStatus.ACCEPTED:
                        row.status = new_status
                        break

            elif subcategory == "PAIR_LINK":
                pair_id = event.data.get("pair_id")
                leg_ids = set()
                for key, _ in PAIR_LEG_KEYS:
                    leg_id = event.data.get(key)
                    if leg_id is not None:
                        pair_links[leg_id] = pair_id
                        leg_ids.add(leg_id)
                for row in rows:
                    if row.order_id in leg_ids:
                        row.pair_id = pair_id

        rows.sort(key=lambda row: row.sort_time)
        logger.debug(f"{session.asset} session: {len(rows)} order rows")
        return rows
