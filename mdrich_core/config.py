"""
MDRICH Unified Configuration System
===================================

Loads and manages configuration from mdrich.yaml with environment variable overrides.
"""

import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_PLANTUML_SERVER = "https://www.plantuml.com/plantuml"
VALID_THEMES = ("dark", "light", "auto")
TRUTHY = ("true", "1", "yes")


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class RenderOptions:
    """Content-type routing toggles handed to the rendering collaborators."""
    enable_math: bool = True
    enable_graphs: bool = True
    enable_mermaid: bool = True
    enable_plantuml: bool = True
    enable_svg: bool = True
    enable_charts: bool = True
    enable_music: bool = True
    enable_syntax_highlighting: bool = True
    plantuml_server_url: str = DEFAULT_PLANTUML_SERVER
    syntax_theme: str = "auto"  # dark | light | auto (detected by the renderer)


@dataclass
class StreamingConfig:
    """Grace periods for chart blocks that are still arriving (seconds)."""
    settle_delay: float = 0.4
    hard_timeout: float = 5.0
    rapid_update_window: float = 0.15


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass
class MDRichConfig:
    """Root configuration container."""
    render: RenderOptions = field(default_factory=RenderOptions)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    version: str = __version__


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find mdrich.yaml by searching upward from start_path.

    Search order:
    1. start_path / mdrich.yaml
    2. start_path / .mdrich / mdrich.yaml
    3. Parent directories (recursive)
    4. ~/.config/mdrich/mdrich.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / "mdrich.yaml", current / ".mdrich" / "mdrich.yaml"):
            if candidate.exists():
                return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "mdrich" / "mdrich.yaml"
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None) -> MDRichConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - MDRICH_ENABLE_MATH -> render.enable_math
    - MDRICH_ENABLE_CHARTS -> render.enable_charts
    - MDRICH_ENABLE_GRAPHS -> render.enable_graphs
    - MDRICH_PLANTUML_SERVER -> render.plantuml_server_url
    - MDRICH_THEME -> render.syntax_theme
    - MDRICH_LOG_LEVEL -> logging.level

    Args:
        config_path: Path to config file (auto-detected if None)

    Returns:
        MDRichConfig instance
    """
    config = MDRichConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
            config = _parse_config_dict(data)
        except (yaml.YAMLError, OSError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
    else:
        logger.info("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)

    return config


def _parse_config_dict(data: Dict[str, Any]) -> MDRichConfig:
    """Parse configuration dictionary into MDRichConfig."""
    config = MDRichConfig()

    if "render" in data:
        render = data["render"] or {}
        defaults = config.render
        config.render = RenderOptions(
            enable_math=render.get("enable_math", defaults.enable_math),
            enable_graphs=render.get("enable_graphs", defaults.enable_graphs),
            enable_mermaid=render.get("enable_mermaid", defaults.enable_mermaid),
            enable_plantuml=render.get("enable_plantuml", defaults.enable_plantuml),
            enable_svg=render.get("enable_svg", defaults.enable_svg),
            enable_charts=render.get("enable_charts", defaults.enable_charts),
            enable_music=render.get("enable_music", defaults.enable_music),
            enable_syntax_highlighting=render.get(
                "enable_syntax_highlighting", defaults.enable_syntax_highlighting
            ),
            plantuml_server_url=render.get("plantuml_server_url", defaults.plantuml_server_url),
            syntax_theme=render.get("syntax_theme", defaults.syntax_theme),
        )

    if "streaming" in data:
        streaming = data["streaming"] or {}
        config.streaming = StreamingConfig(
            settle_delay=float(streaming.get("settle_delay", config.streaming.settle_delay)),
            hard_timeout=float(streaming.get("hard_timeout", config.streaming.hard_timeout)),
            rapid_update_window=float(
                streaming.get("rapid_update_window", config.streaming.rapid_update_window)
            ),
        )

    if "logging" in data:
        log = data["logging"] or {}
        config.logging = LoggingConfig(
            level=log.get("level", config.logging.level),
            format=log.get("format", config.logging.format),
        )

    config.version = data.get("version", config.version)

    return config


def _apply_env_overrides(config: MDRichConfig) -> MDRichConfig:
    """Apply environment variable overrides to config."""

    if os.environ.get("MDRICH_ENABLE_MATH"):
        config.render.enable_math = os.environ["MDRICH_ENABLE_MATH"].lower() in TRUTHY

    if os.environ.get("MDRICH_ENABLE_CHARTS"):
        config.render.enable_charts = os.environ["MDRICH_ENABLE_CHARTS"].lower() in TRUTHY

    if os.environ.get("MDRICH_ENABLE_GRAPHS"):
        config.render.enable_graphs = os.environ["MDRICH_ENABLE_GRAPHS"].lower() in TRUTHY

    if os.environ.get("MDRICH_PLANTUML_SERVER"):
        config.render.plantuml_server_url = os.environ["MDRICH_PLANTUML_SERVER"]

    if os.environ.get("MDRICH_THEME"):
        config.render.syntax_theme = os.environ["MDRICH_THEME"].lower()

    if os.environ.get("MDRICH_LOG_LEVEL"):
        config.logging.level = os.environ["MDRICH_LOG_LEVEL"].upper()

    return config


def _validate_config(config: MDRichConfig) -> None:
    """Validate configuration and log warnings."""

    if config.render.syntax_theme not in VALID_THEMES:
        logger.warning(f"Unknown theme '{config.render.syntax_theme}', defaulting to 'auto'")
        config.render.syntax_theme = "auto"

    if not config.render.plantuml_server_url:
        config.render.plantuml_server_url = DEFAULT_PLANTUML_SERVER

    if config.streaming.hard_timeout < config.streaming.settle_delay:
        logger.warning(
            f"streaming.hard_timeout ({config.streaming.hard_timeout}s) is shorter than "
            f"settle_delay ({config.streaming.settle_delay}s); raising it to match"
        )
        config.streaming.hard_timeout = config.streaming.settle_delay

    if config.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        logger.warning(f"Unknown log level '{config.logging.level}', defaulting to 'INFO'")
        config.logging.level = "INFO"


def save_config(config: MDRichConfig, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: MDRichConfig instance
        path: Output path
    """
    data = {
        "version": config.version,
        "render": {
            "enable_math": config.render.enable_math,
            "enable_graphs": config.render.enable_graphs,
            "enable_mermaid": config.render.enable_mermaid,
            "enable_plantuml": config.render.enable_plantuml,
            "enable_svg": config.render.enable_svg,
            "enable_charts": config.render.enable_charts,
            "enable_music": config.render.enable_music,
            "enable_syntax_highlighting": config.render.enable_syntax_highlighting,
            "plantuml_server_url": config.render.plantuml_server_url,
            "syntax_theme": config.render.syntax_theme,
        },
        "streaming": {
            "settle_delay": config.streaming.settle_delay,
            "hard_timeout": config.streaming.hard_timeout,
            "rapid_update_window": config.streaming.rapid_update_window,
        },
        "logging": {
            "level": config.logging.level,
            "format": config.logging.format,
        },
    }

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to: {path}")


def configure_logging(config: Optional[MDRichConfig] = None) -> None:
    """Apply the logging section to the root logger."""
    if config is None:
        config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format,
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_global_config: Optional[MDRichConfig] = None


def get_config() -> MDRichConfig:
    """Get the global configuration instance (lazy-loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reload_config(config_path: Optional[Path] = None) -> MDRichConfig:
    """Reload configuration from file."""
    global _global_config
    _global_config = load_config(config_path)
    return _global_config
