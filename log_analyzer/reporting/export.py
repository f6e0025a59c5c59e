"""
JSON export of an analysis result.

The document mirrors SessionStats field names in camelCase. Percentages are
rendered as strings with a trailing '%', latency with a trailing 'ms'.

Example document (abridged):
    {
      "fileInfo": {"name": "bot.log", "size": "1.2 MB", "lastModified": "2026-01-27"},
      "filter": "ETH",
      "sessions": [{"asset": "ETH", "duration": "5s", "eventCount": 3, ...}],
      "statistics": {"orders": {"acceptRate": "50.0%", "avgLatency": "120ms", ...}, ...},
      "orders": [{"time": "00:00:01", "status": "Filled", "latency": "42ms", ...}],
      "exportedAt": "2026-01-27T00:10:00"
    }
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from log_analyzer.core.exceptions import ExportError
from log_analyzer.models.event import PayloadValue
from log_analyzer.models.order import OrderDetail
from log_analyzer.models.session import StrategySession
from log_analyzer.models.stats import SessionStats
from log_analyzer.reporting.formatting import (
    format_duration,
    format_number,
    format_percent,
    format_quantity,
)
from log_analyzer.utils.logger import AnalyzerLogger

if TYPE_CHECKING:
    from log_analyzer.analyzer import AnalysisResult

logger = logging.getLogger(__name__)


class ExportModel(BaseModel):
    """Base for export models: snake_case in Python, camelCase in JSON"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileInfo(ExportModel):
    name: str
    size: str
    last_modified: str


class SessionExport(ExportModel):
    asset: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: str
    config: Dict[str, Optional[PayloadValue]]
    event_count: int

    @classmethod
    def from_session(cls, session: StrategySession) -> "SessionExport":
        return cls(
            asset=session.asset,
            start_time=session.start_time,
            end_time=session.end_time,
            duration=session.duration_string,
            config=session.config.to_dict(),
            event_count=session.event_count,
        )


class OrderPairsExport(ExportModel):
    attempted: int
    succeeded: int
    success_rate: str


class OrdersExport(ExportModel):
    total: int
    accepted: int
    rejected: int
    accept_rate: str
    avg_latency: str


class FillsExport(ExportModel):
    total: int
    partial: int
    full: int
    total_qty: str
    avg_price: str


class FastChaseExport(ExportModel):
    events: int
    successes: int
    success_rate: str
    avg_retries: str
    fallback_reasons: Dict[str, int]


class ErrorsExport(ExportModel):
    gtx_rejections: int
    api_errors: int
    timeouts: int
    other: int


class StatisticsExport(ExportModel):
    runtime: str
    spread_triggers: int
    order_pairs: OrderPairsExport
    orders: OrdersExport
    fills: FillsExport
    fast_chase: FastChaseExport
    errors: ErrorsExport

    @classmethod
    def from_stats(cls, stats: SessionStats) -> "StatisticsExport":
        return cls(
            runtime=format_duration(stats.runtime_ms),
            spread_triggers=stats.spread_triggers,
            order_pairs=OrderPairsExport(
                attempted=stats.order_pairs.attempted,
                succeeded=stats.order_pairs.succeeded,
                success_rate=format_percent(stats.order_pairs.success_rate),
            ),
            orders=OrdersExport(
                total=stats.orders.total,
                accepted=stats.orders.accepted,
                rejected=stats.orders.rejected,
                accept_rate=format_percent(stats.orders.accept_rate),
                avg_latency=f"{stats.orders.avg_latency}ms",
            ),
            fills=FillsExport(
                total=stats.fills.total,
                partial=stats.fills.partial,
                full=stats.fills.full,
                total_qty=format_quantity(stats.fills.total_qty),
                avg_price=f"{stats.fills.avg_price:.2f}",
            ),
            fast_chase=FastChaseExport(
                events=stats.fast_chase.events,
                successes=stats.fast_chase.successes,
                success_rate=format_percent(stats.fast_chase.success_rate),
                avg_retries=f"{stats.fast_chase.avg_retries:.1f}",
                fallback_reasons=dict(stats.fast_chase.fallback_reasons),
            ),
            errors=ErrorsExport(
                gtx_rejections=stats.errors.gtx_rejections,
                api_errors=stats.errors.api_errors,
                timeouts=stats.errors.timeouts,
                other=stats.errors.other,
            ),
        )


class OrderExport(ExportModel):
    time: str
    fill_time: str
    symbol: Optional[str] = None
    side: Optional[str] = None
    type: str
    quantity: Optional[PayloadValue] = None
    price: Optional[PayloadValue] = None
    status: str
    latency: Optional[str] = None
    order_id: Optional[PayloadValue] = None
    pair_id: Optional[PayloadValue] = None

    @classmethod
    def from_detail(cls, detail: OrderDetail) -> "OrderExport":
        return cls(
            time=detail.submit_time_string,
            fill_time=detail.fill_time_string,
            symbol=detail.symbol,
            side=detail.side,
            type=detail.order_type,
            quantity=detail.quantity,
            price=detail.price,
            status=detail.status_text,
            latency=f"{format_number(detail.latency)}ms" if detail.latency is not None else None,
            order_id=detail.order_id,
            pair_id=detail.pair_id,
        )


class ExportDocument(ExportModel):
    file_info: Optional[FileInfo] = None
    filter: str
    sessions: List[SessionExport]
    statistics: Optional[StatisticsExport] = None
    orders: List[OrderExport]
    exported_at: datetime


def build_export(
    result: "AnalysisResult",
    file_info: Optional[FileInfo] = None,
    asset: str = "all",
    exported_at: Optional[datetime] = None,
) -> ExportDocument:
    """
    Build the export document for one asset filter.

    Args:
        result: Analysis result to export
        file_info: Source file metadata
        asset: Asset filter ('all' for every session)
        exported_at: Export timestamp (defaults to now)

    Returns:
        ExportDocument; statistics is None when no session matches
    """
    sessions = result.filter_sessions(asset)
    stats = result.stats(asset)
    return ExportDocument(
        file_info=file_info,
        filter=asset,
        sessions=[SessionExport.from_session(session) for session in sessions],
        statistics=StatisticsExport.from_stats(stats) if stats is not None else None,
        orders=[OrderExport.from_detail(detail) for detail in result.order_details(asset)],
        exported_at=exported_at or datetime.now(),
    )


def export_json(
    result: "AnalysisResult",
    file_info: Optional[FileInfo] = None,
    asset: str = "all",
    exported_at: Optional[datetime] = None,
) -> str:
    """Serialize the export document as indented JSON."""
    document = build_export(result, file_info, asset, exported_at)
    return document.model_dump_json(by_alias=True, indent=2)


def write_export(
    result: "AnalysisResult",
    path: str,
    file_info: Optional[FileInfo] = None,
    asset: str = "all",
) -> Path:
    """
    Write the export document to path.

    Raises:
        ExportError: If the file cannot be written
    """
    output = Path(path)
    payload = export_json(result, file_info, asset)
    try:
        output.write_text(payload, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Failed to write export {output}: {e}") from e

    logger.info(f"Exported analysis ({asset}) to {output}")
    AnalyzerLogger.log_export("EXPORT_WRITTEN", {
        "path": str(output),
        "filter": asset,
        "sessions": len(result.filter_sessions(asset)),
    })
    return output
