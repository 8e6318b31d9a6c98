"""
Pytest Configuration and Fixtures
"""

import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove MDRICH_* overrides inherited from the developer's shell."""
    for name in (
        "MDRICH_ENABLE_MATH",
        "MDRICH_ENABLE_CHARTS",
        "MDRICH_ENABLE_GRAPHS",
        "MDRICH_PLANTUML_SERVER",
        "MDRICH_THEME",
        "MDRICH_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mixed_markdown() -> str:
    """Prose with currency, inline math, display math and code."""
    return (
        "# Quarterly notes\n"
        "\n"
        "Budget range: $1,000 - $5,000 for the pilot.\n"
        "The variable $x$ represents the unit price.\n"
        "\n"
        "$$\n"
        "E = mc^2\n"
        "$$\n"
        "\n"
        "Run `echo $HOME` to check.\n"
        "\n"
        "```mermaid\n"
        "graph TD\n"
        "  A[$5 cost] --> B[$$ total]\n"
        "```\n"
    )


@pytest.fixture
def revenue_table() -> str:
    """Chart block in the table dialect."""
    return (
        "type: line\n"
        "title: Revenue\n"
        "| Month | Revenue |\n"
        "|-------|---------|\n"
        "| Jan   | 1200    |\n"
        "| Feb   | 1500    |\n"
    )
