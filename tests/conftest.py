"""
Root pytest configuration for fetchyourkeys.
"""

from fetchyourkeys.config.logging import bootstrap_logging


def pytest_configure(config):
    """Bootstrap logging for the test session."""
    bootstrap_logging()
