"""
Chart Block Parser - JSON, key:value and table dialects

Turns the text of a ```chart, ```chart-json or ```chart-table block into a
ChartConfig. Unparseable input yields None, never an exception, because
blocks are re-parsed on every streamed character.

Key:value dialect::

    type: bar
    title: Sales
    data: [10, 20, 30]
    labels: [Q1, Q2, Q3]
    colors: [#10b981, #3b82f6]

Table dialect::

    type: line
    title: Revenue
    | Month | Revenue |
    |-------|---------|
    | Jan   | 1200    |
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Union

from .streaming import StreamDecision, StreamingMonitor, looks_incomplete
from .types import DEFAULT_COLORS, ChartConfig, ChartConfigError, FormatterConfig
from .validate import validate_chart_config

logger = logging.getLogger(__name__)

JSON_LANGUAGES = ("chart-json",)

PARSE_ERROR = "Invalid chart configuration"

# JavaScript Number() accepts these forms for a trimmed cell
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# =============================================================================
# Value Parsers
# =============================================================================

def _try_parse_json(value: str) -> Any:
    try:
        return json.loads(value)
    except (json.JSONDecodeError, ValueError):
        return None


def _strip_quotes(value: str) -> str:
    return re.sub(r"^['\"]|['\"]$", "", value)


def parse_list_value(value: str) -> List[str]:
    """
    Parse a list-valued key.

    Accepts a JSON array, a bracketed comma list ([a, 'b', "c"]) or a bare
    comma list. Items are trimmed, unquoted, and empty items dropped.
    """
    trimmed = value.strip()
    if not trimmed:
        return []

    parsed = _try_parse_json(trimmed)
    if isinstance(parsed, list):
        return [str(item) for item in parsed]

    if trimmed.startswith("[") and trimmed.endswith("]"):
        trimmed = trimmed[1:-1]

    items = [_strip_quotes(item.strip()) for item in trimmed.split(",")]
    return [item for item in items if item]


def parse_numeric_value(value: str) -> Optional[Union[int, float]]:
    """Parse a number, ignoring a trailing "px" unit."""
    normalized = re.sub(r"px$", "", value.strip(), flags=re.IGNORECASE).strip()
    return coerce_number(normalized)


def coerce_number(text: str) -> Optional[Union[int, float]]:
    """Return text as int/float when the whole string is a number, else None."""
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    if re.fullmatch(r"[+-]?\d+", text):
        return int(text)
    return float(text)


def parse_formatter_value(value: str) -> Optional[FormatterConfig]:
    """Parse a formatter given as a JSON object or as a bare format name."""
    trimmed = value.strip()
    if not trimmed:
        return None
    parsed = _try_parse_json(trimmed)
    if isinstance(parsed, dict):
        return FormatterConfig.from_dict(parsed)
    return FormatterConfig(format=trimmed)


# =============================================================================
# Key Handling
# =============================================================================

def _set_text(name: str) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        config[name] = value
    return apply


def _set_bool(name: str) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        config[name] = value.lower() == "true"
    return apply


def _set_number(name: str) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        parsed = parse_numeric_value(value)
        if parsed is not None:
            config[name] = parsed
    return apply


def _set_list(name: str) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        config[name] = parse_list_value(value)
    return apply


def _set_json(name: str) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        parsed = _try_parse_json(value)
        if parsed is not None:
            config[name] = parsed
    return apply


def _set_formatter_field(name: str, numeric: bool = False) -> Callable[[Dict[str, Any], str], None]:
    def apply(config: Dict[str, Any], value: str) -> None:
        field_value: Any = value
        if numeric:
            field_value = parse_numeric_value(value)
            if field_value is None:
                return
        formatter = config.get("formatter") or FormatterConfig()
        config["formatter"] = formatter.merged(FormatterConfig(**{name: field_value}))
    return apply


def _set_formatter(config: Dict[str, Any], value: str) -> None:
    parsed = parse_formatter_value(value)
    if parsed is not None:
        formatter = config.get("formatter") or FormatterConfig()
        config["formatter"] = formatter.merged(parsed)


# Lower-cased key -> handler writing into the working dictionary
KEY_HANDLERS: Dict[str, Callable[[Dict[str, Any], str], None]] = {
    "type": _set_text("type"),
    "title": _set_text("title"),
    "description": _set_text("description"),
    "xaxislabel": _set_text("xAxisLabel"),
    "yaxislabel": _set_text("yAxisLabel"),
    "yaxisrightlabel": _set_text("yAxisRightLabel"),
    "xkey": _set_text("xKey"),
    "stacked": _set_bool("stacked"),
    "showlegend": _set_bool("showLegend"),
    "showgrid": _set_bool("showGrid"),
    "height": _set_number("height"),
    "width": _set_number("width"),
    "valueformat": _set_formatter_field("format"),
    "valueprefix": _set_formatter_field("prefix"),
    "valuesuffix": _set_formatter_field("suffix"),
    "valuecurrency": _set_formatter_field("currency"),
    "valuedecimals": _set_formatter_field("decimals", numeric=True),
    "formatter": _set_formatter,
    "colors": _set_list("colors"),
    "labels": _set_list("labels"),
    "datakeys": _set_list("dataKeys"),
    "data": _set_json("data"),
    "series": _set_json("series"),
    "referencelines": _set_json("referenceLines"),
}


def apply_config_line(config: Dict[str, Any], line: str) -> None:
    """
    Apply one "key: value" line to the working dictionary.

    The line splits on its first colon. Lines without a colon, empty keys,
    empty values and unknown keys are ignored.
    """
    key, sep, raw_value = line.partition(":")
    if not sep:
        return
    key = key.strip()
    value = raw_value.strip()
    if not key or not value:
        return

    handler = KEY_HANDLERS.get(key.lower())
    if handler is not None:
        handler(config, value)


# =============================================================================
# Dialects
# =============================================================================

def _split_cells(row: str) -> List[str]:
    return [cell.strip() for cell in row.split("|") if cell.strip()]


def _parse_table(lines: List[str], config: Dict[str, Any]) -> None:
    table_lines = [line for line in lines if "|" in line]
    headers = _split_cells(table_lines[0])

    rows = []
    for row in table_lines[2:]:  # skip header and separator
        values = _split_cells(row)
        if not values:
            continue
        record = {}
        for header, value in zip(headers, values):
            number = coerce_number(value)
            record[header] = number if number is not None else value
        rows.append(record)

    config["data"] = rows
    if headers:
        config["xKey"] = headers[0]
        config["dataKeys"] = headers[1:]

    for line in lines:
        if "|" in line:
            break
        apply_config_line(config, line)


def _parse_key_values(lines: List[str], config: Dict[str, Any]) -> None:
    for line in lines:
        apply_config_line(config, line)

    data = config.get("data")
    if isinstance(data, list) and data and all(
        isinstance(v, (int, float)) and not isinstance(v, bool) for v in data
    ):
        labels = config.get("labels") or []
        config["data"] = [
            {"name": labels[idx] if idx < len(labels) else f"Item {idx + 1}", "value": value}
            for idx, value in enumerate(data)
        ]
        config["xKey"] = "name"
        config["dataKeys"] = ["value"]


def parse_chart_config(code: str, language: str = "chart") -> Optional[ChartConfig]:
    """
    Parse chart block text into a ChartConfig.

    Args:
        code: Block body
        language: Block label; "chart-json" selects strict JSON, anything
            else selects the table dialect when a line holds "|" and the
            key:value dialect otherwise

    Returns:
        ChartConfig, or None when the block cannot be parsed
    """
    try:
        if language in JSON_LANGUAGES:
            return ChartConfig.from_dict(json.loads(code))

        lines = code.strip().split("\n")
        config: Dict[str, Any] = {"colors": list(DEFAULT_COLORS)}

        if any("|" in line for line in lines):
            _parse_table(lines, config)
        else:
            _parse_key_values(lines, config)

        if not isinstance(config.get("data"), list):
            config["data"] = []
        if not config.get("colors"):
            config["colors"] = list(DEFAULT_COLORS)

        return ChartConfig.from_dict(config)
    except (json.JSONDecodeError, ChartConfigError, TypeError, ValueError) as e:
        logger.debug(f"Failed to parse chart config: {e}")
        return None


def load_chart(
    code: str,
    language: str = "chart",
    monitor: Optional[StreamingMonitor] = None,
    now: Optional[float] = None,
    source_id: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Parse and validate a chart block, deciding whether errors may be shown.

    Args:
        code: Block body
        language: Block label
        monitor: Streaming state for this block; without one, only the
            text-shape heuristic decides whether the block is pending
        now: Timestamp passed to the monitor
        source_id: Block identity passed to the monitor

    Returns:
        Dict with success, config, error, pending and decision. Consumers
        hide error while pending is True.
    """
    if monitor is not None:
        decision = monitor.observe(code, now=now, source_id=source_id)
    elif looks_incomplete(code):
        decision = StreamDecision.WAITING
    else:
        decision = StreamDecision.COMPLETE

    config = parse_chart_config(code, language)
    if config is None:
        error = PARSE_ERROR
    else:
        errors = validate_chart_config(config)
        error = errors[0] if errors else None

    if error is None:
        return {
            "success": True,
            "config": config,
            "error": None,
            "pending": False,
            "decision": decision,
        }

    return {
        "success": False,
        "config": config,
        "error": error,
        "pending": decision is not StreamDecision.COMPLETE,
        "decision": decision,
    }
