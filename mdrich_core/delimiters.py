"""
Delimiter Normalization and Auto-Wrap

Rewrites legacy LaTeX delimiters to the dollar forms understood by the
markdown math extension, and wraps bare equations, LaTeX invocations and
chemical formulas found in prose with single-dollar delimiters.
"""

import logging
import re
from typing import List

from .masking import MaskKind, PlaceholderMap, contains_placeholder, unmask

logger = logging.getLogger(__name__)


# =============================================================================
# Delimiter Normalization
# =============================================================================

BRACKET_BLOCK_PATTERN = re.compile(r"\\\[(.*?)\\\]", re.DOTALL)
PAREN_INLINE_PATTERN = re.compile(r"\\\((.*?)\\\)", re.DOTALL)


def normalize_delimiters(text: str) -> str:
    """
    Rewrite \\[...\\] to a $$...$$ block and \\(...\\) to $...$.

    The block form is surrounded by newlines so it stands on its own lines.
    """
    text = BRACKET_BLOCK_PATTERN.sub(lambda m: f"\n$${m.group(1)}$$\n", text)
    text = PAREN_INLINE_PATTERN.sub(lambda m: f"${m.group(1)}$", text)
    return text


# =============================================================================
# Auto-Wrap
# =============================================================================

MATH_FUNCTIONS = ("frac", "sqrt", "sum", "int", "lim", "log", "ln", "sin", "cos", "tan", "exp")

# Candidates are bounded by whitespace or the ends of the text
AUTO_WRAP_PATTERNS: List[re.Pattern] = [
    # x^2 + y^2 = z^2, a_1 = 3
    re.compile(
        r"(?<!\S)([a-zA-Z0-9]+\s*[\^_]\s*[a-zA-Z0-9{}]+"
        r"(?:\s*[+\-*/]\s*[a-zA-Z0-9]+\s*[\^_]\s*[a-zA-Z0-9{}]+)*"
        r"\s*=\s*[^$\n]*[^\s$])(?=\s|\Z)"
    ),
    # \frac{a}{b}
    re.compile(r"(?<!\S)(\\frac\{[^}]+\}\{[^}]+\})(?!\S)"),
    # \sqrt..., \sum..., \int... with up to 50 chars of argument
    re.compile(r"(?<!\S)(\\(?:sqrt|int|sum|prod|lim|log|ln|sin|cos|tan|exp)\b[^$\n]{0,50})(?=\s|\Z)"),
    # H2O, CO2, NaCl, Ca(OH)2, SO4-2
    re.compile(
        r"(?<!\S)((?:[A-Z][a-z]?\d*(?:\((?:[A-Z][a-z]?\d*)+\)\d*)?(?:[+-]\d*)?)+)(?!\S)"
    ),
]

MATH_SIGNAL_PATTERN = re.compile(
    r"[\\^_+=<>]|\b(?:" + "|".join(MATH_FUNCTIONS) + r")\b"
)


def _looks_wrappable(candidate: str) -> bool:
    """Require a math signal or corroborated chemistry before wrapping."""
    if re.fullmatch(r"[A-Za-z]", candidate):
        return False

    if MATH_SIGNAL_PATTERN.search(candidate):
        return True

    has_digit = any(ch.isdigit() for ch in candidate)
    has_parens = "(" in candidate or ")" in candidate
    uppercase = sum(1 for ch in candidate if "A" <= ch <= "Z")
    lowercase = sum(1 for ch in candidate if "a" <= ch <= "z")
    return has_digit or has_parens or (uppercase >= 2 and lowercase > 0)


# Regions that are already math: \[..\], \(..\), $$..$$ and unescaped $..$
DELIMITED_PATTERN = re.compile(
    r"\\\[.*?\\\]|\\\(.*?\\\)|\$\$.*?\$\$|(?<!\\)\$[^$\n]*?(?<!\\)\$",
    re.DOTALL,
)


def auto_wrap_math(text: str) -> str:
    """
    Wrap undelimited math and chemistry in $...$.

    Best effort: delimited regions are hidden while the patterns run, a
    candidate holding a "$" or a placeholder token is left alone, single
    letters are never wrapped, and chemistry needs a digit, parentheses, or
    two capitals plus a lowercase letter.
    """
    guarded = PlaceholderMap()
    text = DELIMITED_PATTERN.sub(
        lambda m: guarded.add(MaskKind.DELIMITED_MATH, m.group(0)), text
    )
    wrapped = 0

    def repl(m: re.Match) -> str:
        nonlocal wrapped
        candidate = m.group(1).strip()
        if "$" in m.group(0) or contains_placeholder(m.group(0)):
            return m.group(0)
        if not _looks_wrappable(candidate):
            return m.group(0)
        wrapped += 1
        return m.group(0).replace(candidate, f"${candidate}$", 1)

    for pattern in AUTO_WRAP_PATTERNS:
        text = pattern.sub(repl, text)

    if wrapped:
        logger.debug(f"Auto-wrapped {wrapped} math/chemistry expressions")
    return unmask(text, guarded)
