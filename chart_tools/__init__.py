"""
Chart Tools - Parsing, validation and streaming checks for chart blocks

Pure functions over the text of ```chart, ```chart-json and ```chart-table
blocks. Safe to call on every streamed token.
"""

from mdrich_core.version import __version__

from .types import (
    CHART_TYPES,
    DEFAULT_COLORS,
    ChartConfig,
    ChartConfigError,
    FormatterConfig,
    ReferenceLineConfig,
    SeriesConfig,
)
from .parser import (
    parse_chart_config,
    load_chart,
    parse_list_value,
    parse_numeric_value,
)
from .series import (
    NormalizedSeries,
    build_series,
    infer_axis_label,
    resolve_axis_labels,
)
from .formatting import format_value
from .streaming import (
    StreamDecision,
    StreamingMonitor,
    looks_incomplete,
    pending_reasons,
)
from .validate import validate_chart_config

# Tool registry for dynamic discovery
CHART_TOOLS = {
    "parse_chart_config": {
        "func": parse_chart_config,
        "description": "Parse chart block text (JSON, key:value or table) into a ChartConfig",
        "category": "parsing",
    },
    "load_chart": {
        "func": load_chart,
        "description": "Parse, validate and decide whether errors are still pending",
        "category": "parsing",
    },
    "validate_chart_config": {
        "func": validate_chart_config,
        "description": "List the reasons a parsed chart cannot be rendered",
        "category": "validation",
    },
    "build_series": {
        "func": build_series,
        "description": "Derive fully resolved series from a ChartConfig",
        "category": "rendering",
    },
    "resolve_axis_labels": {
        "func": resolve_axis_labels,
        "description": "Resolve left and right y-axis labels",
        "category": "rendering",
    },
    "format_value": {
        "func": format_value,
        "description": "Format a chart value with a FormatterConfig",
        "category": "rendering",
    },
    "looks_incomplete": {
        "func": looks_incomplete,
        "description": "Guess whether chart block text is still being streamed",
        "category": "streaming",
    },
}


def get_tool(name: str):
    """Get a chart tool by name."""
    if name in CHART_TOOLS:
        return CHART_TOOLS[name]["func"]
    return None


def list_tools(category: str = None) -> list:
    """List available chart tools, optionally filtered by category."""
    if category:
        return [
            name for name, info in CHART_TOOLS.items()
            if info.get("category") == category
        ]
    return list(CHART_TOOLS.keys())


def get_tool_info(name: str) -> dict:
    """Get tool metadata."""
    if name in CHART_TOOLS:
        return {
            "name": name,
            "description": CHART_TOOLS[name]["description"],
            "category": CHART_TOOLS[name]["category"],
        }
    return None


__all__ = [
    # Version
    "__version__",
    # Types
    "CHART_TYPES",
    "DEFAULT_COLORS",
    "ChartConfig",
    "ChartConfigError",
    "FormatterConfig",
    "ReferenceLineConfig",
    "SeriesConfig",
    # Parsing
    "parse_chart_config",
    "load_chart",
    "parse_list_value",
    "parse_numeric_value",
    # Rendering support
    "NormalizedSeries",
    "build_series",
    "infer_axis_label",
    "resolve_axis_labels",
    "format_value",
    # Streaming
    "StreamDecision",
    "StreamingMonitor",
    "looks_incomplete",
    "pending_reasons",
    # Validation
    "validate_chart_config",
    # Registry
    "CHART_TOOLS",
    "get_tool",
    "list_tools",
    "get_tool_info",
]
