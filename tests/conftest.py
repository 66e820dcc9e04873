"""Pytest configuration for textfx tests."""

from typing import Any


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "freetype: mark test as requiring Pillow built with FreeType",
    )
