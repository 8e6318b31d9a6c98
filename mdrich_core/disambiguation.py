"""
Math/Currency Disambiguation

Decides, for single-dollar spans, whether the author meant inline math or a
literal dollar sign. The heuristic defaults to math: single-letter variables
like $x$ are far more common in generated technical prose than stray dollars,
and real amounts were already extracted by the currency pass.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .currency import looks_like_amount
from .masking import MaskKind, PlaceholderMap, contains_placeholder

logger = logging.getLogger(__name__)


GREEK_LETTERS = (
    "alpha", "beta", "gamma", "delta", "epsilon", "theta",
    "lambda", "mu", "pi", "sigma", "omega",
)
FUNCTION_MACROS = ("frac", "sqrt", "sum", "int", "lim", "log", "ln", "sin", "cos", "tan", "exp")

STRICT_NUMBER_PATTERN = re.compile(r"\d+(?:,\d{3})*(?:\.\d{2})?")
OPERATOR_PATTERN = re.compile(r"[+\-*/=<>^_{}()]")
LETTER_DIGIT_PATTERN = re.compile(r"[a-zA-Z].*\d|\d.*[a-zA-Z]")
GREEK_PATTERN = re.compile(r"\\(?:" + "|".join(GREEK_LETTERS) + ")")
FUNCTION_PATTERN = re.compile(r"\\(?:" + "|".join(FUNCTION_MACROS) + ")")

# Unescaped single "$" on both sides, never part of "$$", within one line
INLINE_SPAN_PATTERN = re.compile(r"(?<![\\$])\$(?!\$)([^$\n]+?)(?<![\\$])\$(?!\$)")
STRAY_SPAN_PATTERN = re.compile(r"(?<!\\)\$(?!\$)([^$\n]*?)(?<!\\)\$(?!\$)")


@dataclass(frozen=True)
class SpanClassification:
    """Classification of the interior of a $...$ span."""
    inner: str
    is_math: bool
    reason: str


def classify_span(inner: str) -> SpanClassification:
    """
    Classify the visible interior of a single-dollar span in isolation.

    Math signals: a backslash, an operator or bracket, letters mixed with
    digits, or a Greek-letter or function macro. An interior that is a plain
    number (1,234 or 12.50) with none of those signals is literal text; any
    other interior longer than one character is math.
    """
    if inner.strip() == "":
        return SpanClassification(inner, True, "empty")
    if "\\" in inner:
        return SpanClassification(inner, True, "backslash")
    if OPERATOR_PATTERN.search(inner):
        return SpanClassification(inner, True, "operator")
    if LETTER_DIGIT_PATTERN.search(inner):
        return SpanClassification(inner, True, "letters-and-digits")
    if GREEK_PATTERN.search(inner):
        return SpanClassification(inner, True, "greek")
    if FUNCTION_PATTERN.search(inner):
        return SpanClassification(inner, True, "function")
    if STRICT_NUMBER_PATTERN.fullmatch(inner.strip()):
        return SpanClassification(inner, False, "number")
    if len(inner) > 1:
        return SpanClassification(inner, True, "length")
    return SpanClassification(inner, True, "default")


def protect_inline_math(
    text: str,
    placeholders: PlaceholderMap,
    currency: Optional[PlaceholderMap] = None,
) -> str:
    """
    Mask author-written $...$ spans that are not bare amounts.

    Currency tokens swallowed by a span are expanded back into its stored
    original, since the whole span is math and is restored verbatim.
    """
    def repl(m: re.Match) -> str:
        if looks_like_amount(m.group(1)):
            return m.group(0)
        original = m.group(0)
        if currency is not None and contains_placeholder(original):
            for token, value in currency.items():
                original = original.replace(token, value)
        return placeholders.add(MaskKind.INLINE_MATH, original)

    return INLINE_SPAN_PATTERN.sub(repl, text)


def escape_stray_dollars(text: str) -> str:
    """
    Escape both delimiters of every $...$ span classified as non-math.

    Spans holding placeholder tokens and empty spans are left as they are.
    """
    escaped = 0

    def repl(m: re.Match) -> str:
        nonlocal escaped
        if contains_placeholder(m.group(0)):
            return m.group(0)
        if classify_span(m.group(1)).is_math:
            return m.group(0)
        escaped += 1
        return f"\\${m.group(1)}\\$"

    text = STRAY_SPAN_PATTERN.sub(repl, text)
    if escaped:
        logger.debug(f"Escaped {escaped} non-math dollar spans")
    return text
