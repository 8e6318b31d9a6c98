"""
Tests for configuration loading and code block routing
"""

import logging

import pytest
import yaml

from mdrich_core import config as config_module
from mdrich_core.config import (
    DEFAULT_PLANTUML_SERVER,
    MDRichConfig,
    RenderOptions,
    configure_logging,
    find_config_file,
    load_config,
    reload_config,
    save_config,
)
from mdrich_core.routing import (
    CodeRoute,
    DiagramEngine,
    RouteKind,
    language_from_class,
    markdown_extensions,
    resolve_theme,
    route_code_block,
)
from mdrich_core.version import __version__, get_version_info


class TestLoadConfig:
    """Tests for the YAML loader and overrides."""

    def test_defaults_without_file(self, temp_dir, clean_env):
        config = load_config(temp_dir / "missing.yaml")
        assert config.render.enable_math is True
        assert config.render.plantuml_server_url == DEFAULT_PLANTUML_SERVER
        assert config.streaming.settle_delay == 0.4
        assert config.streaming.hard_timeout == 5.0
        assert config.logging.level == "INFO"
        assert config.version == __version__

    def test_yaml_sections(self, temp_dir, clean_env):
        path = temp_dir / "mdrich.yaml"
        path.write_text(
            "render:\n"
            "  enable_charts: false\n"
            "  syntax_theme: light\n"
            "streaming:\n"
            "  settle_delay: 0.8\n"
            "logging:\n"
            "  level: DEBUG\n"
        )
        config = load_config(path)
        assert config.render.enable_charts is False
        assert config.render.enable_math is True
        assert config.render.syntax_theme == "light"
        assert config.streaming.settle_delay == 0.8
        assert config.streaming.rapid_update_window == 0.15
        assert config.logging.level == "DEBUG"

    def test_env_overrides(self, temp_dir, clean_env):
        clean_env.setenv("MDRICH_ENABLE_MATH", "no")
        clean_env.setenv("MDRICH_THEME", "DARK")
        clean_env.setenv("MDRICH_PLANTUML_SERVER", "http://localhost:8080")
        clean_env.setenv("MDRICH_LOG_LEVEL", "warning")
        config = load_config(temp_dir / "missing.yaml")
        assert config.render.enable_math is False
        assert config.render.syntax_theme == "dark"
        assert config.render.plantuml_server_url == "http://localhost:8080"
        assert config.logging.level == "WARNING"

    def test_malformed_yaml_uses_defaults(self, temp_dir, clean_env, caplog):
        path = temp_dir / "mdrich.yaml"
        path.write_text("render: [unclosed\n")
        config = load_config(path)
        assert config.render.enable_charts is True
        assert "Failed to load config" in caplog.text

    def test_invalid_values_corrected(self, temp_dir, clean_env):
        path = temp_dir / "mdrich.yaml"
        path.write_text(
            "render:\n"
            "  syntax_theme: neon\n"
            "streaming:\n"
            "  settle_delay: 2\n"
            "  hard_timeout: 1\n"
            "logging:\n"
            "  level: chatty\n"
        )
        config = load_config(path)
        assert config.render.syntax_theme == "auto"
        assert config.streaming.hard_timeout == 2.0
        assert config.logging.level == "INFO"

    def test_find_config_file_searches_upward(self, temp_dir):
        (temp_dir / "mdrich.yaml").write_text("version: '0.1.0'\n")
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (temp_dir / "mdrich.yaml").resolve()

    def test_find_config_file_dot_directory(self, temp_dir):
        (temp_dir / ".mdrich").mkdir()
        (temp_dir / ".mdrich" / "mdrich.yaml").write_text("{}\n")
        assert find_config_file(temp_dir) == (temp_dir / ".mdrich" / "mdrich.yaml").resolve()

    def test_save_and_reload(self, temp_dir, clean_env):
        config = MDRichConfig()
        config.render.enable_music = False
        config.streaming.hard_timeout = 8.0
        path = temp_dir / "out" / "mdrich.yaml"
        save_config(config, path)

        data = yaml.safe_load(path.read_text())
        assert data["render"]["enable_music"] is False

        loaded = reload_config(path)
        assert loaded.render.enable_music is False
        assert loaded.streaming.hard_timeout == 8.0
        assert config_module.get_config() is loaded

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
        config = MDRichConfig()
        config.logging.level = "DEBUG"
        configure_logging(config)
        assert calls["level"] == logging.DEBUG
        assert calls["format"] == config.logging.format

    def test_version_info(self):
        info = get_version_info()
        assert info["version"] == __version__
        assert f"{info['major']}.{info['minor']}.{info['patch']}" == __version__


class TestRouteCodeBlock:
    """Tests for route_code_block()."""

    @pytest.mark.parametrize("language,kind", [
        ("chart", RouteKind.CHART),
        ("chart-json", RouteKind.CHART),
        ("chart-table", RouteKind.CHART),
        ("mermaid", RouteKind.MERMAID),
        ("plantuml", RouteKind.PLANTUML),
        ("puml", RouteKind.PLANTUML),
        ("svg", RouteKind.SVG),
        ("abc", RouteKind.MUSIC),
        ("music", RouteKind.MUSIC),
        ("python", RouteKind.HIGHLIGHTED),
        ("", RouteKind.PLAIN),
    ])
    def test_default_routes(self, language, kind):
        assert route_code_block(language, "body\n").kind is kind

    def test_trailing_newline_dropped_once(self):
        route = route_code_block("python", "x = 1\n\n")
        assert route.code == "x = 1\n"

    def test_case_insensitive(self):
        assert route_code_block("Mermaid", "graph TD").kind is RouteKind.MERMAID

    def test_inline(self):
        route = route_code_block("", "x\n", inline=True)
        assert route == CodeRoute(RouteKind.INLINE, "", "x\n")

    def test_disabled_charts_highlighted(self):
        options = RenderOptions(enable_charts=False)
        assert route_code_block("chart", "type: bar", options).kind is RouteKind.HIGHLIGHTED

    def test_graphs_toggle_covers_diagrams(self):
        options = RenderOptions(enable_graphs=False)
        for language in ("mermaid", "plantuml", "svg"):
            assert route_code_block(language, "x", options).kind is RouteKind.HIGHLIGHTED

    def test_individual_diagram_toggle(self):
        options = RenderOptions(enable_mermaid=False)
        assert route_code_block("mermaid", "x", options).kind is RouteKind.HIGHLIGHTED
        assert route_code_block("svg", "x", options).kind is RouteKind.SVG

    def test_plain_when_highlighting_disabled(self):
        options = RenderOptions(enable_syntax_highlighting=False)
        assert route_code_block("python", "x", options).kind is RouteKind.PLAIN

    def test_plantuml_server(self):
        options = RenderOptions(plantuml_server_url="http://uml.local")
        assert route_code_block("puml", "@startuml", options).server_url == "http://uml.local"

    def test_highlight_theme(self):
        route = route_code_block("python", "x", RenderOptions(), detected_theme="light")
        assert route.theme == "light"


class TestRoutingHelpers:
    """Tests for language, theme and extension helpers."""

    def test_language_from_class(self):
        assert language_from_class("language-Chart-JSON") == "chart-json"
        assert language_from_class("hljs language-python") == "python"
        assert language_from_class(None) == ""
        assert language_from_class("plain") == ""

    def test_resolve_theme(self):
        assert resolve_theme(RenderOptions(syntax_theme="light"), "dark") == "light"
        assert resolve_theme(RenderOptions(), "light") == "light"
        assert resolve_theme(RenderOptions()) == "dark"

    def test_markdown_extensions(self):
        assert markdown_extensions() == ["gfm", "math"]
        assert markdown_extensions(RenderOptions(enable_math=False)) == ["gfm"]


class TestDiagramEngine:
    """Tests for the one-time initialized diagram collaborator."""

    def test_initializer_runs_once(self):
        calls = []
        engine = DiagramEngine(initializer=lambda: calls.append(1))
        assert engine.ensure_initialized() is True
        assert engine.ensure_initialized() is False
        assert engine.initialized is True
        assert calls == [1]

    def test_render_initializes(self):
        calls = []
        engine = DiagramEngine(
            initializer=lambda: calls.append("init"),
            render_diagram=lambda source: f"<svg>{source}</svg>",
        )
        assert engine.render("A-->B") == "<svg>A-->B</svg>"
        assert calls == ["init"]

    def test_missing_collaborators(self):
        engine = DiagramEngine()
        with pytest.raises(RuntimeError):
            engine.render("A-->B")
        with pytest.raises(RuntimeError):
            engine.sanitize("<svg/>")

    def test_sanitize(self):
        engine = DiagramEngine(sanitize=lambda html: html.replace("<script>", ""))
        assert engine.sanitize("<svg><script></svg>") == "<svg></svg>"
