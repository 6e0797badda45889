"""Tests for JSON report export."""
from datetime import datetime, timezone

import orjson
from src.parse.models import GuildItemSummary, GuildWeekAggregate
from src.store.report_storage import ReportStorage


def test_save_report_writes_rows(tmp_path):
    """Test a saved report holds its name, timestamp and rows."""
    storage = ReportStorage(tmp_path / "reports")
    rows = [
        GuildWeekAggregate(
            guild_id=5,
            guild_name="Dragons",
            week_number=0,
            week_start=datetime(2023, 11, 14, 14, tzinfo=timezone.utc),
            week_end=datetime(2023, 11, 21, 14, tzinfo=timezone.utc),
            total_sales=1200,
        )
    ]
    path = storage.save_report("guild_weeks", rows)

    assert path.parent == tmp_path / "reports"
    assert path.name.startswith("guild_weeks_")
    payload = orjson.loads(path.read_bytes())
    assert payload["report"] == "guild_weeks"
    assert "generated_at" in payload
    assert payload["rows"][0]["guild_name"] == "Dragons"
    assert payload["rows"][0]["total_sales"] == 1200
    assert payload["rows"][0]["week_start"].startswith("2023-11-14T14:00:00")
    assert payload["rows"][0]["week_display"] == "Week 14.11.23 - 21.11.23"


def test_save_report_includes_fees(tmp_path):
    """Test computed fee fields are exported."""
    storage = ReportStorage(tmp_path)
    rows = [
        GuildItemSummary(
            item_id=1,
            item_link="item:1",
            guild_id=5,
            guild_name="Dragons",
            total_value_sold=10000,
        )
    ]
    payload = orjson.loads(storage.save_report("guild_items", rows).read_bytes())

    assert payload["rows"][0]["fee_3_5_percent"] == 350
    assert payload["rows"][0]["fee_1_percent"] == 100


def test_save_empty_report(tmp_path):
    """Test an empty report is still written."""
    path = ReportStorage(tmp_path).save_report("items", [])
    assert orjson.loads(path.read_bytes())["rows"] == []
