"""
Currency Normalizer - Pull dollar amounts out of the math passes' way

Amount-like lexemes ($5, $1,234.50, -$(20), $3.5M, $10 million) and ranges
of two amounts ($5-$10, $1,000 – $5,000) are replaced by placeholder tokens
so that no later pass can pair their "$" with another as a math delimiter.
Runs on masked text only.
"""

import logging
import re
from typing import Optional, Tuple

from .masking import MaskKind, PlaceholderMap

logger = logging.getLogger(__name__)


# =============================================================================
# Lexeme Grammar
# =============================================================================

# Magnitude suffix, optionally separated by one space
SUFFIX = r"(?:\s?(?i:kilo|million|billion|[kmb]))?"

# $1,234.56 / -$(1,234) style: thousands groups of exactly three digits
GROUPED_AMOUNT = r"-?(?<!\\)\$\(?\d{1,3}(?:,\d{3})*(?:\.\d+)?\)?" + SUFFIX

# $12345 / $-12.5 style: plain digit run
PLAIN_AMOUNT = r"(?<!\\)\$-?\d+(?:\.\d+)?" + SUFFIX

# A lexeme must not run into further word characters ($10n is algebra)
LEXEME = rf"(?:{GROUPED_AMOUNT}|{PLAIN_AMOUNT})(?!\w)"

RANGE_PATTERN = re.compile(rf"({LEXEME})(\s?[–-]\s?)({LEXEME})")
SINGLE_PATTERN = re.compile(LEXEME)

# Interior of a $...$ span that is just a number, e.g. "$1,000$"
AMOUNT_PATTERN = re.compile(
    r"-?\d{1,3}(?:,\d{3})*(?:\.\d+)?(?:\s?(?i:kilo|million|billion|[kmb]))?"
)


def looks_like_amount(text: str) -> bool:
    """Check whether trimmed text is a bare amount with optional suffix."""
    return AMOUNT_PATTERN.fullmatch(text.strip()) is not None


def extract_currency(
    text: str,
    placeholders: Optional[PlaceholderMap] = None,
) -> Tuple[str, PlaceholderMap]:
    """
    Replace currency lexemes and ranges with placeholder tokens.

    Ranges are matched first; each side gets its own token and the
    separator stays literal text. A lone "$" with no digits is left alone
    for the math passes.

    Args:
        text: Masked markdown text
        placeholders: Currency map to extend (a new one is created if None)

    Returns:
        Tuple of (text_with_tokens, currency_map)
    """
    if placeholders is None:
        placeholders = PlaceholderMap()

    def range_repl(m: re.Match) -> str:
        left = placeholders.add(MaskKind.CURRENCY, m.group(1))
        right = placeholders.add(MaskKind.CURRENCY, m.group(3))
        return f"{left}{m.group(2)}{right}"

    def single_repl(m: re.Match) -> str:
        return placeholders.add(MaskKind.CURRENCY, m.group(0))

    text = RANGE_PATTERN.sub(range_repl, text)
    text = SINGLE_PATTERN.sub(single_repl, text)

    if placeholders:
        logger.debug(f"Extracted {len(placeholders)} currency lexemes")
    return text, placeholders
