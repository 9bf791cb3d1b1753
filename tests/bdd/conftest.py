"""
Pytest configuration for BDD tests.

This module provides shared fixtures and configuration for the
pytest-bdd behavior-driven tests of the practice engine.
"""

import pytest


@pytest.fixture(autouse=True)
def setup_logging():
    """Configure logging for BDD tests."""
    from loguru import logger
    import sys

    # Remove default handler
    logger.remove()

    # Add test handler
    logger.add(
        sys.stderr,
        level="DEBUG",
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )

    yield

    # Cleanup
    logger.remove()


def pytest_bdd_apply_tag(tag, function):
    """
    Apply pytest markers based on Gherkin tags.

    Tags in the feature file become pytest markers:
    - @mastery -> pytest.mark.mastery
    - @critical -> pytest.mark.critical
    """
    marker = getattr(pytest.mark, tag)
    return marker(function)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "critical: Critical path tests"
    )
    config.addinivalue_line(
        "markers", "mastery: Tests for per-word mastery transitions"
    )
    config.addinivalue_line(
        "markers", "revision: Tests for revision of mastered words"
    )
    config.addinivalue_line(
        "markers", "session: Tests for session completion and rotation"
    )
    config.addinivalue_line(
        "markers", "progression: Tests for complexity level unlocks"
    )
