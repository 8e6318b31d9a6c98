"""
Value Formatting

Renders chart numbers for axis ticks and tooltips according to a
FormatterConfig: plain grouped numbers, compact (1.2K), currency, percent.
"""

import math
from typing import Any, Optional, Tuple

from .types import FormatterConfig

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "CN¥",
    "INR": "₹",
    "KRW": "₩",
    "CAD": "CA$",
    "AUD": "A$",
}
ZERO_DECIMAL_CURRENCIES = ("JPY", "KRW")

COMPACT_UNITS = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))
MAX_FRACTION_DIGITS = 20


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def format_fixed(value: float, min_digits: int = 0, max_digits: int = 3, grouping: bool = True) -> str:
    """Format with at most max_digits decimals, trimming zeros down to min_digits."""
    max_digits = max(max_digits, min_digits)
    text = f"{value:,.{max_digits}f}" if grouping else f"{value:.{max_digits}f}"
    if max_digits > min_digits and "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0")
        if len(frac) < min_digits:
            frac = frac + "0" * (min_digits - len(frac))
        text = f"{whole}.{frac}" if frac else whole
    if text.startswith("-") and float(text.replace(",", "")) == 0:
        text = text[1:]
    return text


def _digits(value: Any) -> Optional[int]:
    # Payloads from chart-json are untyped; anything but a finite number is ignored
    if not _is_number(value) or math.isinf(value):
        return None
    return min(max(int(value), 0), MAX_FRACTION_DIGITS)


def _fraction_digits(formatter: FormatterConfig) -> Tuple[Optional[int], Optional[int]]:
    digits = _digits(formatter.decimals)
    if digits is not None:
        return digits, digits
    return _digits(formatter.minimum_fraction_digits), _digits(formatter.maximum_fraction_digits)


def _format_compact(value: float, min_digits: Optional[int], max_digits: Optional[int]) -> str:
    units = [(1.0, "")] + list(reversed(COMPACT_UNITS))
    idx = 0
    for i, (threshold, _) in enumerate(units):
        if abs(value) >= threshold:
            idx = i

    while True:
        threshold, suffix = units[idx]
        scaled = value / threshold
        if max_digits is None:
            magnitude = abs(scaled)
            digits = 0 if magnitude >= 10 else (1 if magnitude >= 1 else 2)
        else:
            digits = max_digits
        if abs(round(scaled, digits)) >= 1000 and idx + 1 < len(units):
            idx += 1
            continue
        return format_fixed(scaled, min_digits or 0, digits) + suffix


def format_value(value: Any, formatter: Optional[FormatterConfig] = None) -> Any:
    """
    Format a chart value for display.

    Args:
        value: Cell value; non-numbers pass through (None becomes "")
        formatter: Display rules (grouped, up to 3 decimals when None)

    Returns:
        Formatted string for numbers, the value itself otherwise
    """
    if not _is_number(value):
        return "" if value is None else value

    if formatter is None:
        return format_fixed(value, 0, 3)

    fmt = formatter.format or "number"
    min_digits, max_digits = _fraction_digits(formatter)

    if fmt == "currency":
        code = (formatter.currency or "USD").upper()
        default_digits = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
        min_d = default_digits if min_digits is None else min_digits
        max_d = max(default_digits, min_d) if max_digits is None else max_digits
        symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
        body = format_fixed(abs(value), min_d, max_d)
        sign = "-" if value < 0 and body.strip("0.,") else ""
        formatted = f"{sign}{symbol}{body}"
    elif fmt == "percent":
        formatted = format_fixed(value * 100, min_digits or 0, 0 if max_digits is None else max_digits) + "%"
    elif fmt == "compact":
        formatted = _format_compact(value, min_digits, max_digits)
    else:
        formatted = format_fixed(value, min_digits or 0, 2 if max_digits is None else max_digits)

    return f"{formatter.prefix or ''}{formatted}{formatter.suffix or ''}"
