"""
Segment Masking - Protect verbatim regions from text rewriting

Display math, fenced code and inline code are swapped for opaque placeholder
tokens before any rewriting pass runs, and swapped back at the very end.
Each token is an index into an out-of-band table of protected spans.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# Placeholder Tokens
# =============================================================================

# STX/ETX never occur in markdown source; they bracket every token so no
# later regex pass can match across or inside one.
PLACEHOLDER_OPEN = "\x02"
PLACEHOLDER_CLOSE = "\x03"

TOKEN_PATTERN = re.compile(r"\x02__([A-Z]+(?:_[A-Z]+)*)_(\d+)__\x03")


class MaskKind(str, Enum):
    """Kinds of protected spans."""
    DISPLAY_MATH = "DISPLAY_MATH"
    FENCED_CODE = "FENCED_CODE"
    INLINE_CODE = "INLINE_CODE"
    INLINE_MATH = "INLINE_MATH"
    CURRENCY = "CURRENCY"
    DELIMITED_MATH = "DELIMITED_MATH"


def make_token(kind: MaskKind, index: int) -> str:
    """Build the placeholder token for a span."""
    return f"{PLACEHOLDER_OPEN}__{kind.value}_{index}__{PLACEHOLDER_CLOSE}"


def contains_placeholder(text: str) -> bool:
    """Check whether text holds at least one placeholder token."""
    return TOKEN_PATTERN.search(text) is not None


def strip_sentinels(text: str) -> str:
    """Remove the token bracket characters from raw input."""
    return text.replace(PLACEHOLDER_OPEN, "").replace(PLACEHOLDER_CLOSE, "")


@dataclass
class PlaceholderMap:
    """
    Ordered mapping from placeholder token to the original text it replaces.

    The counter is shared by every sub-pass that writes into the same map,
    so tokens are unique within one preprocessing run.
    """
    entries: Dict[str, str] = field(default_factory=dict)
    counter: int = 0

    def add(self, kind: MaskKind, original: str) -> str:
        """Store original text and return its token."""
        token = make_token(kind, self.counter)
        self.counter += 1
        self.entries[token] = original
        return token

    def items(self) -> List[Tuple[str, str]]:
        return list(self.entries.items())

    def count(self, kind: MaskKind) -> int:
        """Number of stored spans of one kind."""
        marker = f"__{kind.value}_"
        return sum(1 for token in self.entries if marker in token)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, token: str) -> bool:
        return token in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)


# =============================================================================
# Masking Patterns
# =============================================================================

# $$...$$ spanning lines, empty bodies included
DISPLAY_MATH_PATTERN = re.compile(r"\$\$(.*?)\$\$", re.DOTALL)

# ``` or ~~~ fence with optional info string. The closing fence must sit alone
# on its line (trailing blanks allowed); a fence that never closes swallows
# the rest of the input.
# Leading newline is captured, trailing newline is left for the next fence.
FENCED_CODE_PATTERN = re.compile(
    r"(^|\n)(```|~~~)([^\n]*)"
    r"(?:\n(?:.*?\n)?\2[ \t]*(?=\n|\Z)|\n.*\Z|\Z)",
    re.DOTALL,
)

INLINE_CODE_PATTERN = re.compile(r"`[^`]+`")


def _masker(placeholders: PlaceholderMap, kind: MaskKind):
    def repl(m: re.Match) -> str:
        return placeholders.add(kind, m.group(0))
    return repl


def mask(
    text: str,
    placeholders: Optional[PlaceholderMap] = None,
) -> Tuple[str, PlaceholderMap]:
    """
    Replace display math, fenced code and inline code with placeholders.

    Passes run in priority order: display math, then fenced code, then
    inline code. Later passes see the tokens of earlier ones as inert text.

    Args:
        text: Markdown source
        placeholders: Existing map to extend (a new one is created if None)

    Returns:
        Tuple of (masked_text, placeholder_map)
    """
    if placeholders is None:
        placeholders = PlaceholderMap()

    text = DISPLAY_MATH_PATTERN.sub(_masker(placeholders, MaskKind.DISPLAY_MATH), text)
    text = FENCED_CODE_PATTERN.sub(_masker(placeholders, MaskKind.FENCED_CODE), text)
    text = INLINE_CODE_PATTERN.sub(_masker(placeholders, MaskKind.INLINE_CODE), text)

    logger.debug(
        f"Masked {placeholders.count(MaskKind.DISPLAY_MATH)} display math, "
        f"{placeholders.count(MaskKind.FENCED_CODE)} fenced, "
        f"{placeholders.count(MaskKind.INLINE_CODE)} inline code spans"
    )
    return text, placeholders


def unmask(text: str, placeholders: PlaceholderMap) -> str:
    """
    Substitute every placeholder back to its original text.

    Tokens are expanded newest first, so a span captured by a later pass
    that swallowed an earlier token is opened before that inner token.
    """
    for token, original in reversed(placeholders.items()):
        text = text.replace(token, original)
    return text
