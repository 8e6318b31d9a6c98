"""
Code Block Routing

Decides which rendering collaborator receives a fenced block, based on its
label and the caller's feature toggles, and holds the process-wide one-time
initialization of the diagram engine.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .config import RenderOptions

logger = logging.getLogger(__name__)


CHART_LANGUAGES = ("chart", "chart-json", "chart-table")
PLANTUML_LANGUAGES = ("plantuml", "puml")
MUSIC_LANGUAGES = ("abc", "music")

LANGUAGE_CLASS_PATTERN = re.compile(r"language-([\w-]+)")


class RouteKind(str, Enum):
    """Rendering targets for a code span or block."""
    INLINE = "inline"
    CHART = "chart"
    MERMAID = "mermaid"
    PLANTUML = "plantuml"
    SVG = "svg"
    MUSIC = "music"
    HIGHLIGHTED = "highlighted"
    PLAIN = "plain"


@dataclass(frozen=True)
class CodeRoute:
    """A routed code block: where it goes and what it carries."""
    kind: RouteKind
    language: str
    code: str
    theme: Optional[str] = None
    server_url: Optional[str] = None


def language_from_class(class_name: Optional[str]) -> str:
    """Extract the lower-cased label from a "language-xxx" class name."""
    match = LANGUAGE_CLASS_PATTERN.search(class_name or "")
    return match.group(1).lower() if match else ""


def resolve_theme(options: RenderOptions, detected: Optional[str] = None) -> str:
    """Explicit theme wins, then the detected one, then dark."""
    if options.syntax_theme in ("dark", "light"):
        return options.syntax_theme
    if detected in ("dark", "light"):
        return detected
    return "dark"


def route_code_block(
    language: str,
    code: str,
    options: Optional[RenderOptions] = None,
    inline: bool = False,
    detected_theme: Optional[str] = None,
) -> CodeRoute:
    """
    Route a code span or fenced block to its renderer.

    Args:
        language: Block label (info string), case-insensitive
        code: Block body as extracted by the markdown renderer
        options: Feature toggles (defaults: everything enabled)
        inline: True for inline code spans
        detected_theme: Theme detected by the host, used when options say "auto"

    Returns:
        CodeRoute with the target kind and the body without its trailing newline
    """
    if options is None:
        options = RenderOptions()

    language = (language or "").strip().lower()

    if inline:
        return CodeRoute(RouteKind.INLINE, language, code)

    if code.endswith("\n"):
        code = code[:-1]

    if options.enable_charts and language in CHART_LANGUAGES:
        return CodeRoute(RouteKind.CHART, language, code)

    if options.enable_graphs:
        if language == "mermaid" and options.enable_mermaid:
            return CodeRoute(RouteKind.MERMAID, language, code)
        if language in PLANTUML_LANGUAGES and options.enable_plantuml:
            return CodeRoute(RouteKind.PLANTUML, language, code, server_url=options.plantuml_server_url)
        if language == "svg" and options.enable_svg:
            return CodeRoute(RouteKind.SVG, language, code)

    if options.enable_music and language in MUSIC_LANGUAGES:
        return CodeRoute(RouteKind.MUSIC, language, code)

    if options.enable_syntax_highlighting and language:
        return CodeRoute(
            RouteKind.HIGHLIGHTED, language, code,
            theme=resolve_theme(options, detected_theme),
        )

    return CodeRoute(RouteKind.PLAIN, language, code)


def markdown_extensions(options: Optional[RenderOptions] = None) -> List[str]:
    """Parser extensions the downstream markdown renderer should enable."""
    if options is None:
        options = RenderOptions()
    extensions = ["gfm"]
    if options.enable_math:
        extensions.append("math")
    return extensions


# =============================================================================
# Collaborators
# =============================================================================

class DiagramEngine:
    """
    Process-scoped handle on an external diagram engine.

    The initializer runs at most once, however many blocks request it.
    Rendering and sanitization are injected callables.
    """

    def __init__(
        self,
        initializer: Optional[Callable[[], None]] = None,
        render_diagram: Optional[Callable[[str], str]] = None,
        sanitize: Optional[Callable[[str], str]] = None,
    ):
        self._initializer = initializer
        self._render_diagram = render_diagram
        self._sanitize = sanitize
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> bool:
        """
        Run the one-time initializer if it has not run yet.

        Returns:
            True if this call performed the initialization
        """
        if self._initialized:
            return False
        if self._initializer is not None:
            self._initializer()
        self._initialized = True
        logger.debug("Diagram engine initialized")
        return True

    def render(self, source: str) -> str:
        """Render diagram source to an image reference."""
        if self._render_diagram is None:
            raise RuntimeError("No diagram renderer configured")
        self.ensure_initialized()
        return self._render_diagram(source)

    def sanitize(self, html: str) -> str:
        """Sanitize foreign markup such as inline SVG."""
        if self._sanitize is None:
            raise RuntimeError("No sanitizer configured")
        return self._sanitize(html)
