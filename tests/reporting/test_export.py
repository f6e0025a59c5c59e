"""
Unit tests for the JSON export document
"""

import json
from datetime import datetime

import pytest

from log_analyzer.analyzer import LogAnalyzer
from log_analyzer.core.exceptions import ExportError
from log_analyzer.reporting import FileInfo, build_export, export_json, write_export


def line(seconds: int, body: str) -> str:
    return f"[2026-01-27 00:00:{seconds:02d}.000][INFO][executor] {body}"


LOG = "\n".join([
    line(0, "[LIFECYCLE][ETH] start_strategy called | qty=1, direction=long, spread_threshold=0.1"),
    line(1, "[AUDIT][SPREAD_MET][ETH] Spread condition met | spread=0.12"),
    line(2, "[AUDIT][ORDER_SUBMIT][ETH] Submitting order | symbol=ETHUSDT, side=BUY, qty=1, price=2500"),
    line(3, "[AUDIT][ORDER_RESPONSE][ETH] Order accepted | order_id=101, symbol=ETHUSDT, latency_ms=42"),
    line(4, "[AUDIT][ORDER_FILL][ETH] USDT order filled | order_id=101, last_filled=1, price=2500.25"),
    line(5, "[LIFECYCLE][ETH] StrategyExecutorTask::run completed"),
])

EXPORTED_AT = datetime(2026, 1, 27, 1, 0, 0)


@pytest.fixture
def result():
    return LogAnalyzer().analyze(LOG)


class TestBuildExport:
    def test_document(self, result):
        info = FileInfo(name="bot.log", size="1.2 KB", last_modified="2026-01-27")
        document = build_export(result, file_info=info, asset="ETH", exported_at=EXPORTED_AT)

        assert document.filter == "ETH"
        assert document.file_info == info
        assert len(document.sessions) == 1
        assert document.sessions[0].duration == "5s"
        assert document.sessions[0].event_count == 6

        statistics = document.statistics
        assert statistics.runtime == "5s"
        assert statistics.spread_triggers == 1
        assert statistics.orders.accept_rate == "100.0%"
        assert statistics.orders.avg_latency == "42ms"
        assert statistics.fills.total_qty == "1"
        assert statistics.fills.avg_price == "2500.25"
        assert statistics.fast_chase.avg_retries == "0.0"

        (order,) = document.orders
        assert order.time == "00:00:02"
        assert order.fill_time == "00:00:04"
        assert order.status == "Filled"
        assert order.latency == "42ms"
        assert order.order_id == 101

    def test_unmatched_filter_has_no_statistics(self, result):
        document = build_export(result, asset="BTC", exported_at=EXPORTED_AT)

        assert document.sessions == []
        assert document.statistics is None
        assert document.orders == []


class TestExportJson:
    def test_camel_case_keys(self, result):
        payload = json.loads(export_json(result, asset="all", exported_at=EXPORTED_AT))

        assert set(payload) == {"fileInfo", "filter", "sessions", "statistics", "orders", "exportedAt"}
        assert payload["filter"] == "all"
        assert payload["fileInfo"] is None
        assert payload["exportedAt"] == "2026-01-27T01:00:00"

        session = payload["sessions"][0]
        assert session["startTime"] == "2026-01-27T00:00:00"
        assert session["eventCount"] == 6
        assert session["config"] == {"qty": 1, "direction": "long", "spreadThreshold": 0.1}

        statistics = payload["statistics"]
        assert statistics["spreadTriggers"] == 1
        assert statistics["orderPairs"]["successRate"] == "0.0%"
        assert statistics["errors"] == {"gtxRejections": 0, "apiErrors": 0, "timeouts": 0, "other": 0}
        assert payload["orders"][0]["fillTime"] == "00:00:04"


class TestWriteExport:
    def test_write(self, result, tmp_path):
        output = write_export(result, str(tmp_path / "analysis.json"), asset="ETH")

        assert output.exists()
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["filter"] == "ETH"
        assert len(payload["sessions"]) == 1

    def test_unwritable_path_raises(self, result, tmp_path):
        with pytest.raises(ExportError) as exc_info:
            write_export(result, str(tmp_path / "missing" / "analysis.json"))

        assert "Failed to write export" in str(exc_info.value)
