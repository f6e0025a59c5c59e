"""
Command line entry point for the strategy log analyzer.

Usage:
    log-analyzer logs/bot.log [--asset ETH] [--by-session] [--export out.json]
"""

import argparse
import logging
import sys
from typing import List, Optional

from log_analyzer.analyzer import ALL_ASSETS, AnalysisResult, LogAnalyzer
from log_analyzer.core.exceptions import ConfigurationError, ExportError, LogFileError
from log_analyzer.models.order import OrderDetail
from log_analyzer.models.stats import SessionStats
from log_analyzer.reporting.export import write_export
from log_analyzer.reporting.formatting import (
    format_duration,
    format_number,
    format_percent,
    format_quantity,
    format_time,
)
from log_analyzer.utils.config import ConfigManager, LoggingConfig
from log_analyzer.utils.logger import AnalyzerLogger

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze strategy sessions and order execution from a bot log"
    )
    parser.add_argument("log_file", type=str, help="Path to the log file")
    parser.add_argument(
        "--asset",
        type=str,
        default=ALL_ASSETS,
        help="Only analyze sessions for this asset (default: all)",
    )
    parser.add_argument(
        "--by-session",
        action="store_true",
        help="Print order history per session (one row per fill)",
    )
    parser.add_argument(
        "--export",
        type=str,
        help="Optional: Save the analysis as a JSON document",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default="configs",
        help="Directory holding analyzer_config.ini/yaml (default: configs)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the configured log level",
    )
    return parser


def print_summary(result: AnalysisResult, asset: str, stats: Optional[SessionStats]) -> None:
    print(f"\n{'=' * 70}")
    print("📊 STRATEGY LOG ANALYSIS")
    print(f"{'=' * 70}")
    print(f"Lines: {result.total_lines} ({result.skipped_lines} skipped)")
    print(f"Events: {len(result.events)}")
    print(f"Assets: {', '.join(result.assets) or '-'}")
    print(f"Filter: {asset}")

    sessions = result.filter_sessions(asset)
    print(f"\n🧭 Sessions ({len(sessions)}):")
    for session in sessions:
        end = format_time(session.end_time) if session.end_time else "ongoing"
        print(
            f"   {session.asset:<6} {format_time(session.start_time)} -> {end:<8} "
            f"{session.duration_string:>10}  events={session.event_count}"
        )

    if stats is None:
        print("\n   No sessions found")
        return

    orders, fills, chase, errors = stats.orders, stats.fills, stats.fast_chase, stats.errors
    print("\n📈 Statistics:")
    print(f"   Runtime:          {format_duration(stats.runtime_ms)}")
    print(f"   Spread triggers:  {stats.spread_triggers}")
    print(
        f"   Order pairs:      {stats.order_pairs.succeeded}/{stats.order_pairs.attempted} "
        f"({format_percent(stats.order_pairs.success_rate)})"
    )
    print(
        f"   Orders:           total={orders.total} accepted={orders.accepted} "
        f"rejected={orders.rejected} ({format_percent(orders.accept_rate)}), "
        f"avg latency {orders.avg_latency}ms"
    )
    print(
        f"   Fills:            total={fills.total} partial={fills.partial} full={fills.full} "
        f"qty={format_quantity(fills.total_qty)} (USDT {format_quantity(fills.usdt_qty)}, "
        f"USDC {format_quantity(fills.usdc_qty)}) avg price {fills.avg_price:.2f}"
    )
    print(
        f"   Fast chase:       {chase.successes}/{chase.events} "
        f"({format_percent(chase.success_rate)}), avg retries {chase.avg_retries:.1f}"
    )
    for reason, count in sorted(chase.fallback_reasons.items(), key=lambda x: x[1], reverse=True):
        print(f"      - fallback {reason}: {count}")
    print(
        f"   Errors:           GTX={errors.gtx_rejections} API={errors.api_errors} "
        f"timeouts={errors.timeouts} other={errors.other}"
    )


def print_orders(rows: List[OrderDetail], indent: str = "   ") -> None:
    if not rows:
        print(f"{indent}(no orders)")
        return
    print(
        f"{indent}{'submit':<9}{'fill':<9}{'symbol':<10}{'side':<6}{'qty':>10}"
        f"{'filled':>10}{'price':>12}  {'status':<9}{'latency':>8}  order_id / pair_id"
    )
    for row in rows:
        latency = f"{format_number(row.latency)}ms" if row.latency is not None else "-"
        print(
            f"{indent}{row.submit_time_string:<9}{row.fill_time_string:<9}"
            f"{row.symbol or '-':<10}{row.side or '-':<6}{str(row.quantity or '-'):>10}"
            f"{format_quantity(row.filled_qty):>10}{str(row.price or '-'):>12}  "
            f"{row.status_text:<9}{latency:>8}  {row.order_id} / {row.pair_id or '-'}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the analyzer CLI.

    Returns:
        Process exit code (0 success, 1 file/export/config error)
    """
    args = build_arg_parser().parse_args(argv)

    try:
        config = ConfigManager(config_dir=args.config_dir)
        logging_config = config.logging_config
        if args.log_level:
            logging_config = LoggingConfig(log_level=args.log_level, log_dir=logging_config.log_dir)
        AnalyzerLogger(logging_config)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ Cannot set up logging: {e}", file=sys.stderr)
        return 1

    analyzer = LogAnalyzer(config.parser_config)
    try:
        file_info, result = analyzer.analyze_file(args.log_file)
    except LogFileError as e:
        logger.error(str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 1

    stats = result.stats(args.asset)
    print_summary(result, args.asset, stats)

    if args.by_session:
        for history in result.orders_by_session(args.asset):
            summary = history.session
            print(f"\n🧾 {summary.asset} session {format_time(summary.start_time)} ({summary.duration}):")
            print_orders(history.orders)
    else:
        print("\n🧾 Orders:")
        print_orders(result.order_details(args.asset))

    if args.export:
        try:
            output = write_export(result, args.export, file_info=file_info, asset=args.asset)
        except ExportError as e:
            logger.error(str(e))
            print(f"❌ {e}", file=sys.stderr)
            return 1
        print(f"\n✅ JSON export saved to: {output}")

    print(f"\n{'=' * 70}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
