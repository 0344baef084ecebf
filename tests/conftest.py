"""
Pytest configuration and shared fixtures for all GOS tests.

The parse driver is stateless after construction (compiled grammar and pass
registry are read-only), so one instance is shared by the whole session.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from gos.driver import ParseDriver, ParseOptions


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_driver():
    """
    Session-scoped driver shared across ALL tests.

    Safe to share: every parse builds its own ErrorCollection, transformer
    and pass context.
    """
    return ParseDriver()


@pytest.fixture(scope="class")
def driver(session_driver):
    """Class-scoped driver - returns the session driver."""
    return session_driver


# =============================================================================
# Helper fixtures
# =============================================================================

@pytest.fixture
def parse_source(session_driver):
    """Parse with the session driver; keyword arguments become ParseOptions fields."""
    def _parse(source: str, **options):
        return session_driver.parse(source, ParseOptions(**options))
    return _parse


@pytest.fixture
def collect(parse_source):
    """Parse in collect-all mode."""
    def _collect(source: str, **options):
        return parse_source(source, collect_errors=True, **options)
    return _collect


@pytest.fixture
def gos_file(tmp_path):
    """Write source to a .gos file in a temp dir and return its path."""
    def _write(source: str, name: str = "main.gos") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path
    return _write


def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
