"""
Chart Configuration Types

Typed, immutable records for chart blocks. Field names are snake_case;
the wire form (JSON payloads, to_dict output) uses the camelCase keys
the rendering collaborators expect.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple, Union

CHART_TYPES = ("bar", "line", "pie", "area", "scatter", "composed")
SERIES_TYPES = ("bar", "line", "area", "scatter")
VALUE_FORMATS = ("number", "compact", "currency", "percent")

DEFAULT_COLORS: Tuple[str, ...] = (
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
    "#f59e0b",
    "#10b981",
    "#06b6d4",
    "#6366f1",
    "#ef4444",
)

DEFAULT_HEIGHT = 320


class ChartConfigError(ValueError):
    """Raised by strict conversions when a payload cannot form a chart."""
    pass


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class _WireRecord:
    """camelCase dict conversion shared by the chart records."""

    @classmethod
    def _wire_keys(cls) -> Dict[str, str]:
        return {f.name: _to_camel(f.name) for f in fields(cls)}

    @classmethod
    def _kwargs_from(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {}
        for name, key in cls._wire_keys().items():
            if key in data:
                kwargs[name] = data[key]
            elif name in data:
                kwargs[name] = data[name]
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire dictionary, omitting unset fields."""
        result = {}
        for name, key in self._wire_keys().items():
            value = getattr(self, name)
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class FormatterConfig(_WireRecord):
    """Numeric display rules for ticks and tooltips."""
    format: Optional[str] = None
    currency: Optional[str] = None
    decimals: Optional[float] = None
    minimum_fraction_digits: Optional[int] = None
    maximum_fraction_digits: Optional[int] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormatterConfig":
        return cls(**cls._kwargs_from(data))

    def merged(self, other: "FormatterConfig") -> "FormatterConfig":
        """Overlay the fields set in other onto this formatter."""
        values = self.to_dict()
        values.update(other.to_dict())
        return FormatterConfig.from_dict(values)


@dataclass(frozen=True)
class SeriesConfig(_WireRecord):
    """Per-series descriptor as written by the author."""
    key: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    y_axis_id: Optional[str] = None
    stack_id: Optional[str] = None
    stroke_width: Optional[float] = None
    dot: Optional[bool] = None
    opacity: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SeriesConfig":
        return cls(**cls._kwargs_from(data))


@dataclass(frozen=True)
class ReferenceLineConfig(_WireRecord):
    """Horizontal (y) or vertical (x) axis marker."""
    x: Optional[Union[str, float]] = None
    y: Optional[Union[str, float]] = None
    label: Optional[str] = None
    color: Optional[str] = None
    stroke_dasharray: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceLineConfig":
        return cls(**cls._kwargs_from(data))


@dataclass(frozen=True)
class ChartConfig(_WireRecord):
    """
    Parsed chart block.

    Built fresh from block text on every parse and never mutated; a change
    in the block text means a new parse.
    """
    type: Optional[str] = None
    data: Tuple[Any, ...] = ()
    title: Optional[str] = None
    description: Optional[str] = None
    x_key: Optional[str] = None
    data_keys: Optional[Tuple[str, ...]] = None
    colors: Optional[Tuple[str, ...]] = None
    labels: Optional[Tuple[str, ...]] = None
    series: Optional[Tuple[SeriesConfig, ...]] = None
    reference_lines: Optional[Tuple[ReferenceLineConfig, ...]] = None
    formatter: Optional[FormatterConfig] = None
    stacked: Optional[bool] = None
    show_legend: Optional[bool] = None
    show_grid: Optional[bool] = None
    x_axis_label: Optional[str] = None
    y_axis_label: Optional[str] = None
    y_axis_right_label: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], strict: bool = False) -> "ChartConfig":
        """
        Build a configuration from a wire dictionary.

        Args:
            data: Dictionary with camelCase (or snake_case) keys
            strict: Raise ChartConfigError on malformed members instead of
                dropping them

        Returns:
            ChartConfig instance
        """
        if not isinstance(data, dict):
            raise ChartConfigError(f"Chart payload must be an object, got {type(data).__name__}")

        kwargs = cls._kwargs_from(data)

        raw_data = kwargs.get("data", [])
        if isinstance(raw_data, (list, tuple)):
            kwargs["data"] = tuple(raw_data)
        elif strict:
            raise ChartConfigError("'data' must be an array")
        else:
            kwargs["data"] = ()

        for name in ("data_keys", "colors", "labels"):
            value = kwargs.get(name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                kwargs[name] = tuple(str(item) for item in value)
            elif strict:
                raise ChartConfigError(f"'{_to_camel(name)}' must be an array")
            else:
                kwargs[name] = None

        kwargs["series"] = _records(kwargs.get("series"), SeriesConfig, "series", strict)
        kwargs["reference_lines"] = _records(
            kwargs.get("reference_lines"), ReferenceLineConfig, "referenceLines", strict
        )

        formatter = kwargs.get("formatter")
        if isinstance(formatter, FormatterConfig):
            pass
        elif isinstance(formatter, dict):
            kwargs["formatter"] = FormatterConfig.from_dict(formatter)
        elif isinstance(formatter, str):
            kwargs["formatter"] = FormatterConfig(format=formatter)
        elif formatter is not None:
            if strict:
                raise ChartConfigError("'formatter' must be an object")
            kwargs["formatter"] = None

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["data"] = [dict(row) if isinstance(row, dict) else row for row in self.data]
        for name in ("data_keys", "colors", "labels"):
            value = getattr(self, name)
            if value is not None:
                result[_to_camel(name)] = list(value)
        if self.series is not None:
            result["series"] = [s.to_dict() for s in self.series]
        if self.reference_lines is not None:
            result["referenceLines"] = [r.to_dict() for r in self.reference_lines]
        if self.formatter is not None:
            result["formatter"] = self.formatter.to_dict()
        return result

    # Defaults applied by the rendering collaborators

    def palette(self) -> Tuple[str, ...]:
        return self.colors if self.colors else DEFAULT_COLORS

    def resolved_height(self) -> float:
        return self.height or DEFAULT_HEIGHT

    def resolved_show_grid(self) -> bool:
        return True if self.show_grid is None else self.show_grid

    def resolved_show_legend(self, series_count: int) -> bool:
        if self.show_legend is not None:
            return self.show_legend
        return self.type == "pie" or series_count > 1


def _records(value: Any, record_cls, key: str, strict: bool):
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        if strict:
            raise ChartConfigError(f"'{key}' must be an array")
        return None
    records = []
    for item in value:
        if isinstance(item, record_cls):
            records.append(item)
        elif isinstance(item, dict):
            records.append(record_cls.from_dict(item))
        elif strict:
            raise ChartConfigError(f"'{key}' entries must be objects")
    return tuple(records)
