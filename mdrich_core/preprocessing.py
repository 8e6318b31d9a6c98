"""
Markdown Preprocessing Pipeline

Rewrites raw markdown that mixes prose, dollar amounts, LaTeX, chemistry and
code so a commonmark + GFM + math renderer can parse it without confusing
currency with math, corrupting code, or choking on partial input.

Pass order:
    mask code/display math -> extract currency -> protect inline math
    -> auto-wrap -> normalize delimiters -> escape stray dollars
    -> restore currency (escaped) -> unmask
"""

import logging
import re
from typing import Any, Dict

from .currency import extract_currency
from .delimiters import auto_wrap_math, normalize_delimiters
from .disambiguation import escape_stray_dollars, protect_inline_math
from .masking import MaskKind, PlaceholderMap, mask, strip_sentinels
from .restore import restore

logger = logging.getLogger(__name__)


def _normalize_newlines(content: str) -> str:
    return strip_sentinels(content.replace("\r\n", "\n").replace("\r", "\n"))


def _run_pipeline(content: str) -> Dict[str, Any]:
    processed = _normalize_newlines(content)

    processed, masks = mask(processed)
    processed, currency = extract_currency(processed)
    processed = protect_inline_math(processed, masks, currency)
    processed = auto_wrap_math(processed)
    processed = normalize_delimiters(processed)
    processed = escape_stray_dollars(processed)
    processed = restore(processed, currency, masks)

    return {
        "content": processed.rstrip() + "\n",
        "masks": masks,
        "currency": currency,
    }


def preprocess_markdown(content: str) -> str:
    """
    Preprocess markdown so currency and math no longer collide.

    Never raises: if any pass fails, the original input is returned
    unchanged and a warning is logged.

    Args:
        content: Raw markdown, possibly still streaming in

    Returns:
        Rewritten markdown ending with a single newline ("" for empty input)
    """
    if not content or not isinstance(content, str):
        return ""

    try:
        return _run_pipeline(content)["content"]
    except Exception as e:
        logger.warning(f"Error preprocessing markdown: {e}")
        return content


def preprocess_with_report(content: str) -> Dict[str, Any]:
    """
    Preprocess markdown and report what was protected.

    Returns:
        dict with keys:
            - success: bool (False when the pipeline fell back to the input)
            - content: preprocessed text
            - stats: counts of protected spans per kind
            - error: error message (if failed)
    """
    result: Dict[str, Any] = {"success": True}

    if not content or not isinstance(content, str):
        result["content"] = ""
        result["stats"] = {}
        return result

    try:
        run = _run_pipeline(content)
    except Exception as e:
        logger.warning(f"Error preprocessing markdown: {e}")
        result["success"] = False
        result["content"] = content
        result["error"] = str(e)
        result["stats"] = {}
        return result

    masks: PlaceholderMap = run["masks"]
    result["content"] = run["content"]
    result["stats"] = {
        "display_math": masks.count(MaskKind.DISPLAY_MATH),
        "fenced_code": masks.count(MaskKind.FENCED_CODE),
        "inline_code": masks.count(MaskKind.INLINE_CODE),
        "inline_math": masks.count(MaskKind.INLINE_MATH),
        "currency": len(run["currency"]),
    }
    return result


# =============================================================================
# Detection
# =============================================================================

CURRENCY_STRIP_PATTERN = re.compile(r"\$\s?\d+(?:,\d{3})*(?:\.\d+)?\b")
MATH_NOTATION_PATTERNS = [
    re.compile(r"\$\$[\s\S]+?\$\$"),
    re.compile(r"(?<!\\)\$[^$\n]+?(?<!\\)\$"),
    re.compile(r"\\\[[\s\S]+?\\\]"),
    re.compile(r"\\\([^)]+?\\\)"),
]


def contains_math_notation(text: str) -> bool:
    """Detect likely math without false positives from currency amounts."""
    without_currency = CURRENCY_STRIP_PATTERN.sub("", text)
    return any(p.search(without_currency) for p in MATH_NOTATION_PATTERNS)
