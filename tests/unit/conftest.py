"""
Unit test conftest.py for fetchyourkeys.

Unit tests never reach the network: clients are built with an in-memory keys
client or with requests.get patched.
"""

import pytest


@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    """Fail loudly if a test forgets to stub the HTTP layer."""
    def _blocked(*args, **kwargs):
        raise AssertionError("Unit tests must not perform real HTTP requests")
    monkeypatch.setattr("fetchyourkeys.api_client.remote_client.requests.get", _blocked)
