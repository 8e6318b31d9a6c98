"""
Chart Validation - Required fields and shape checks

A configuration can parse cleanly and still be unusable (no type, no
rows). Validation reports these as human-readable reasons; the caller
decides whether to show them or wait for more input.
"""

from typing import Any, Dict, List

from .types import CHART_TYPES, SERIES_TYPES, VALUE_FORMATS, ChartConfig

EMPTY_DATA_ERROR = "Chart data is empty"
MISSING_TYPE_ERROR = "Chart type is required (bar, line, pie, area, scatter, composed)"

# Subset of JSON Schema understood by _check_schema
CHART_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["type", "data"],
    "properties": {
        "type": {"type": "string", "enum": list(CHART_TYPES)},
        "data": {"type": "array", "minItems": 1},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "xKey": {"type": "string"},
        "dataKeys": {"type": "array", "items": {"type": "string"}},
        "colors": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "width": {"type": ["integer", "number"], "minimum": 0},
        "height": {"type": ["integer", "number"], "minimum": 0},
        "stacked": {"type": "boolean"},
        "showLegend": {"type": "boolean"},
        "showGrid": {"type": "boolean"},
        "series": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["key"],
                "properties": {
                    "key": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "enum": list(SERIES_TYPES)},
                    "yAxisId": {"type": "string", "enum": ["left", "right"]},
                    "strokeWidth": {"type": ["integer", "number"], "minimum": 0},
                    "dot": {"type": "boolean"},
                    "opacity": {"type": ["integer", "number"], "minimum": 0, "maximum": 1},
                },
            },
        },
        "referenceLines": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "position": {"type": "string", "enum": ["start", "middle", "end"]},
                },
            },
        },
        "formatter": {
            "type": "object",
            "properties": {
                "format": {"type": "string", "enum": list(VALUE_FORMATS)},
                "decimals": {"type": ["integer", "number"], "minimum": 0, "maximum": 20},
            },
        },
    },
}


def validate_chart_config(config: ChartConfig) -> List[str]:
    """
    Validate a parsed configuration.

    Returns:
        List of error messages, empty when the chart can be rendered.
        Empty data and a missing type come first, with fixed wording.
    """
    if not config.data:
        return [EMPTY_DATA_ERROR]
    if not config.type:
        return [MISSING_TYPE_ERROR]
    if config.type not in CHART_TYPES:
        return [f"Unsupported chart type '{config.type}'"]

    return _check_schema(config.to_dict(), CHART_SCHEMA, "")


JSON_TYPES = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (str, "string"),
    (list, "array"),
    (dict, "object"),
)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    for py_type, name in JSON_TYPES:
        if isinstance(value, py_type):
            return name
    return "unknown"


def _check_schema(data: Any, schema: Dict, path: str) -> List[str]:
    """Check data against the CHART_SCHEMA keyword subset, recursing into members."""
    where = path or "root"
    errors = []

    allowed = schema.get("type")
    if allowed is not None:
        actual = _json_type(data)
        if actual not in (allowed if isinstance(allowed, list) else [allowed]):
            errors.append(f"{where}: expected {allowed}, got {actual}")
            return errors

    if "enum" in schema and data not in schema["enum"]:
        errors.append(f"{where}: value {data!r} not in {schema['enum']}")

    if isinstance(data, dict):
        errors.extend(_check_object(data, schema, path))
    elif isinstance(data, list):
        errors.extend(_check_array(data, schema, path))
    elif isinstance(data, str):
        if len(data) < schema.get("minLength", 0):
            errors.append(f"{where}: string length {len(data)} < minLength {schema['minLength']}")
    elif isinstance(data, (int, float)) and not isinstance(data, bool):
        if "minimum" in schema and data < schema["minimum"]:
            errors.append(f"{where}: value {data} < minimum {schema['minimum']}")
        if "maximum" in schema and data > schema["maximum"]:
            errors.append(f"{where}: value {data} > maximum {schema['maximum']}")

    return errors


def _check_object(data: Dict, schema: Dict, path: str) -> List[str]:
    errors = [
        f"{path or 'root'}: missing required field '{name}'"
        for name in schema.get("required", [])
        if name not in data
    ]
    properties = schema.get("properties", {})
    for key, value in data.items():
        if key in properties:
            errors.extend(_check_schema(value, properties[key], f"{path}.{key}" if path else key))
    return errors


def _check_array(data: List, schema: Dict, path: str) -> List[str]:
    errors = []
    if len(data) < schema.get("minItems", 0):
        errors.append(f"{path}: array length {len(data)} < minItems {schema['minItems']}")
    if "items" in schema:
        for i, item in enumerate(data):
            errors.extend(_check_schema(item, schema["items"], f"{path}[{i}]"))
    return errors
