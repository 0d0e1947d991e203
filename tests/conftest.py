"""
Pytest configuration and fixtures for the test suite.

This file is automatically loaded by pytest before running tests.
It keeps the session cache out of the user's home directory and clears
configuration overrides that would leak in from the shell.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("TINIFY_SESSION_DIR", str(tmp_path / "session"))
    monkeypatch.delenv("TINIFY_BASE_URL", raising=False)
    monkeypatch.delenv("TINIFY_TIMEOUT_MS", raising=False)
    monkeypatch.delenv("HTTP_TIMEOUT_SECONDS", raising=False)
    yield
