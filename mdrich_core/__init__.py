"""
MDRICH Core - Markdown preprocessing for math, currency and code

Rewrites LLM-generated markdown so a commonmark + GFM + math renderer
reads "$" correctly, and routes fenced blocks to rendering collaborators.
"""

from .version import __version__, get_version

from .masking import (
    MaskKind,
    PlaceholderMap,
    mask,
    unmask,
)
from .currency import extract_currency, looks_like_amount
from .delimiters import auto_wrap_math, normalize_delimiters
from .disambiguation import (
    SpanClassification,
    classify_span,
    escape_stray_dollars,
    protect_inline_math,
)
from .restore import restore
from .preprocessing import (
    contains_math_notation,
    preprocess_markdown,
    preprocess_with_report,
)
from .config import (
    MDRichConfig,
    RenderOptions,
    StreamingConfig,
    LoggingConfig,
    load_config,
    save_config,
    get_config,
    reload_config,
    configure_logging,
)
from .routing import (
    CodeRoute,
    DiagramEngine,
    RouteKind,
    language_from_class,
    resolve_theme,
    route_code_block,
)

__all__ = [
    # Version
    "__version__",
    "get_version",
    # Masking
    "MaskKind",
    "PlaceholderMap",
    "mask",
    "unmask",
    # Currency
    "extract_currency",
    "looks_like_amount",
    # Delimiters
    "auto_wrap_math",
    "normalize_delimiters",
    # Disambiguation
    "SpanClassification",
    "classify_span",
    "escape_stray_dollars",
    "protect_inline_math",
    # Restore
    "restore",
    # Pipeline
    "contains_math_notation",
    "preprocess_markdown",
    "preprocess_with_report",
    # Configuration
    "MDRichConfig",
    "RenderOptions",
    "StreamingConfig",
    "LoggingConfig",
    "load_config",
    "save_config",
    "get_config",
    "reload_config",
    "configure_logging",
    # Routing
    "CodeRoute",
    "DiagramEngine",
    "RouteKind",
    "language_from_class",
    "resolve_theme",
    "route_code_block",
]
