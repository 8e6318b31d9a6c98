"""
MDRICH version, imported by both packages and by pyproject metadata.
"""

__version__ = "0.4.2"

VERSION_INFO = tuple(int(part) for part in __version__.split("."))


def get_version() -> str:
    """Get the current MDRICH version string."""
    return __version__


def get_version_info() -> dict:
    major, minor, patch = VERSION_INFO
    return {"version": __version__, "major": major, "minor": minor, "patch": patch}
