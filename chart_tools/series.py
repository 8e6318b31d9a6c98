"""
Series Derivation

Expands a ChartConfig into fully resolved series descriptors (color, render
type, axis, stacking, stroke, dots, opacity) for the chart widget.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .types import ChartConfig, SeriesConfig

DEFAULT_AXIS_LABEL = "Value"


@dataclass(frozen=True)
class NormalizedSeries:
    """Series with every rendering attribute resolved."""
    key: str
    name: str
    type: str
    color: str
    y_axis_id: str
    opacity: float
    stroke_width: float
    dot: bool
    stack_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        result = {
            "key": self.key,
            "name": self.name,
            "type": self.type,
            "color": self.color,
            "yAxisId": self.y_axis_id,
            "opacity": self.opacity,
            "strokeWidth": self.stroke_width,
            "dot": self.dot,
        }
        if self.stack_id is not None:
            result["stackId"] = self.stack_id
        return result


def default_series_type(chart_type: Optional[str]) -> str:
    """Series render type implied by the chart type."""
    if chart_type in ("line", "area", "scatter"):
        return chart_type
    return "bar"


def build_series(config: ChartConfig) -> List[NormalizedSeries]:
    """
    Derive the series to draw.

    Explicit series win; otherwise one series per data key, or a single
    "value" series. Series without a key are dropped. Composed charts let
    each series pick its own type; other charts force the chart's type.
    """
    if config.series:
        base = list(config.series)
    elif config.data_keys:
        base = [SeriesConfig(key=key) for key in config.data_keys]
    else:
        base = [SeriesConfig(key="value")]
    base = [series for series in base if series.key]

    colors = config.palette()
    fallback_type = default_series_type(config.type)

    derived = []
    for idx, series in enumerate(base):
        if config.type == "composed":
            resolved_type = series.type or fallback_type
        else:
            resolved_type = fallback_type

        if series.stack_id is not None:
            stack_id = series.stack_id
        elif config.stacked:
            stack_id = "stack"
        else:
            stack_id = None

        derived.append(NormalizedSeries(
            key=series.key,
            name=series.name if series.name is not None else series.key,
            type=resolved_type,
            color=series.color if series.color is not None else colors[idx % len(colors)],
            y_axis_id=series.y_axis_id or "left",
            stack_id=stack_id,
            stroke_width=series.stroke_width if series.stroke_width is not None
            else (2 if resolved_type == "line" else 1),
            dot=series.dot if isinstance(series.dot, bool) else True,
            opacity=series.opacity if series.opacity is not None
            else (0.55 if resolved_type == "area" else 1),
        ))
    return derived


def infer_axis_label(series: List[NormalizedSeries], axis: str) -> Optional[str]:
    """Join the unique names of the series on an axis with " / "."""
    names = [item.name or item.key for item in series if item.y_axis_id == axis]
    names = [name for name in names if name]
    if not names:
        return None
    return " / ".join(dict.fromkeys(names))


def resolve_axis_labels(
    config: ChartConfig,
    series: List[NormalizedSeries],
) -> Tuple[str, Optional[str]]:
    """
    Resolve the left and right y-axis labels.

    Returns:
        Tuple of (left_label, right_label); right_label is None when no
        series sits on the right axis
    """
    left = config.y_axis_label or infer_axis_label(series, "left") or DEFAULT_AXIS_LABEL
    right = None
    if any(item.y_axis_id == "right" for item in series):
        right = config.y_axis_right_label or infer_axis_label(series, "right") or DEFAULT_AXIS_LABEL
    return left, right
