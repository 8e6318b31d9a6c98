"""
Tests for streaming completeness checks and chart validation
"""

import pytest

from chart_tools import (
    ChartConfig,
    StreamDecision,
    StreamingMonitor,
    looks_incomplete,
    parse_chart_config,
    pending_reasons,
    validate_chart_config,
)
from chart_tools.streaming import is_separator_row
from chart_tools.validate import EMPTY_DATA_ERROR, MISSING_TYPE_ERROR
from mdrich_core.config import StreamingConfig


HEADER = "| Month | Revenue |\n|-------|---------|"


class TestLooksIncomplete:
    """Tests for looks_incomplete()."""

    def test_truncated_json(self):
        text = '{"type": "bar", "data": [1, 2'
        assert parse_chart_config(text, "chart-json") is None
        assert looks_incomplete(text) is True

    def test_complete_json(self):
        assert looks_incomplete('{"type": "bar", "data": [1, 2]}') is False

    def test_header_and_separator_only(self):
        assert looks_incomplete(HEADER) is True

    def test_one_full_row(self):
        assert looks_incomplete(HEADER + "\n| Jan | 1200 |") is False

    def test_rows_without_separator(self):
        assert looks_incomplete("| Month | Revenue |\n| Jan | 1200 |") is True

    def test_short_last_row(self):
        text = "| a | b | c |\n|---|---|---|\n| 1 | 2 | 3 |\n| 4 |"
        assert looks_incomplete(text) is True

    def test_last_row_one_cell_short(self):
        text = "| a | b | c |\n|---|---|---|\n| 1 | 2 | 3 |\n| 4 | 5 |"
        assert looks_incomplete(text) is False

    def test_bare_key(self):
        assert looks_incomplete("type: bar\ntitle:") is True
        assert looks_incomplete("type: bar\ntitle:   \n\n") is True

    def test_key_value_complete(self):
        assert looks_incomplete("type: bar\ndata: [1, 2, 3]") is False

    def test_empty_text(self):
        assert looks_incomplete("") is False

    def test_reasons(self):
        assert pending_reasons('{"data": [1') == ["unbalanced braces", "unbalanced brackets"]
        assert pending_reasons(HEADER) == ["table without data rows"]
        assert pending_reasons("type: bar") == []

    @pytest.mark.parametrize("line,expected", [
        ("|---|---|", True),
        ("| :--- | ---: |", True),
        ("---", True),
        ("| Jan | 1200 |", False),
        ("| - x |", False),
    ])
    def test_separator_rows(self, line, expected):
        assert is_separator_row(line) is expected


class TestStreamingMonitor:
    """Tests for StreamingMonitor timing decisions."""

    @pytest.fixture
    def monitor(self):
        return StreamingMonitor(settle_delay=0.4, hard_timeout=5.0, rapid_update_window=0.15)

    def test_incomplete_waits_then_settles(self, monitor):
        assert monitor.observe(HEADER, now=0.0) is StreamDecision.WAITING
        assert monitor.observe(HEADER, now=0.2) is StreamDecision.WAITING
        assert monitor.observe(HEADER, now=0.5) is StreamDecision.COMPLETE

    def test_complete_text_is_complete(self, monitor):
        assert monitor.observe(HEADER + "\n| Jan | 1 |", now=0.0) is StreamDecision.COMPLETE

    def test_rapid_update(self, monitor):
        monitor.observe("type: bar", now=0.0)
        assert monitor.observe("type: bar\ntitle: S", now=0.05) is StreamDecision.RAPID_UPDATE

    def test_slow_update_not_rapid(self, monitor):
        monitor.observe("type: bar", now=0.0)
        assert monitor.observe("type: bar\ntitle: S", now=1.0) is StreamDecision.COMPLETE

    def test_change_restarts_settle_timer(self, monitor):
        monitor.observe("type: bar\ndata:", now=0.0)
        monitor.observe("type: bar\ndata: [1", now=1.0)
        assert monitor.observe("type: bar\ndata: [1", now=1.2) is StreamDecision.WAITING
        assert monitor.observe("type: bar\ndata: [1", now=1.5) is StreamDecision.COMPLETE

    def test_hard_timeout(self, monitor):
        texts = ['{"data": [' + "1, " * i for i in range(12)]
        decisions = [monitor.observe(text, now=i * 0.5) for i, text in enumerate(texts)]
        assert decisions[0] is StreamDecision.WAITING
        assert decisions[5] is StreamDecision.WAITING
        assert decisions[10] is StreamDecision.COMPLETE

    def test_source_change_resets(self, monitor):
        monitor.observe("type: bar", now=0.0, source_id="a")
        decision = monitor.observe("type: line", now=0.05, source_id="b")
        assert decision is StreamDecision.COMPLETE
        assert monitor.source_id == "b"

    def test_reset(self, monitor):
        monitor.observe(HEADER, now=0.0)
        monitor.observe(HEADER, now=10.0)
        monitor.reset()
        assert monitor.observe(HEADER, now=11.0) is StreamDecision.WAITING

    def test_from_config(self):
        monitor = StreamingMonitor.from_config(StreamingConfig(settle_delay=1.0, hard_timeout=3.0))
        assert monitor.settle_delay == 1.0
        assert monitor.hard_timeout == 3.0
        assert monitor.rapid_update_window == 0.15

    def test_default_clock(self, monitor):
        assert monitor.observe("type: bar\ndata: [1]") is StreamDecision.COMPLETE


class TestValidateChartConfig:
    """Tests for validate_chart_config()."""

    def test_valid(self, revenue_table):
        assert validate_chart_config(parse_chart_config(revenue_table)) == []

    def test_empty_data(self):
        assert validate_chart_config(ChartConfig(type="bar")) == [EMPTY_DATA_ERROR]
        assert EMPTY_DATA_ERROR == "Chart data is empty"

    def test_missing_type(self):
        config = ChartConfig.from_dict({"data": [{"a": 1}]})
        assert validate_chart_config(config) == [MISSING_TYPE_ERROR]
        assert MISSING_TYPE_ERROR == "Chart type is required (bar, line, pie, area, scatter, composed)"

    def test_unsupported_type(self):
        config = ChartConfig.from_dict({"type": "donut", "data": [{"a": 1}]})
        assert validate_chart_config(config) == ["Unsupported chart type 'donut'"]

    def test_series_errors_have_paths(self):
        config = ChartConfig.from_dict({
            "type": "composed",
            "data": [{"a": 1}],
            "series": [{"key": "a", "yAxisId": "middle"}, {"key": "b", "type": "pie"}],
        })
        errors = validate_chart_config(config)
        assert any(e.startswith("series[0].yAxisId:") for e in errors)
        assert any(e.startswith("series[1].type:") for e in errors)

    def test_missing_series_key(self):
        config = ChartConfig.from_dict({
            "type": "bar",
            "data": [{"a": 1}],
            "series": [{"name": "unnamed"}],
        })
        errors = validate_chart_config(config)
        assert errors == ["series[0]: missing required field 'key'"]

    def test_opacity_range(self):
        config = ChartConfig.from_dict({
            "type": "area",
            "data": [{"a": 1}],
            "series": [{"key": "a", "opacity": 1.5}],
        })
        assert validate_chart_config(config) == ["series[0].opacity: value 1.5 > maximum 1"]

    def test_unknown_format(self):
        config = ChartConfig.from_dict({
            "type": "bar",
            "data": [{"a": 1}],
            "formatter": {"format": "roman"},
        })
        errors = validate_chart_config(config)
        assert len(errors) == 1
        assert errors[0].startswith("formatter.format:")

    def test_wrong_type_reported_once(self):
        config = ChartConfig.from_dict({
            "type": "bar",
            "data": [{"a": 1}],
            "formatter": {"decimals": "2"},
        })
        assert validate_chart_config(config) == [
            "formatter.decimals: expected ['integer', 'number'], got string"
        ]
