# ABOUTME: Shared test fixtures for the cupola test suite.
# ABOUTME: Sets up or clears the Meteomatics credential environment variables.

import pytest


@pytest.fixture
def credentials_env(monkeypatch):
    monkeypatch.setenv("METEOMATICS_USERNAME", "alice")
    monkeypatch.setenv("METEOMATICS_PASSWORD", "s3cret")


@pytest.fixture
def no_credentials_env(monkeypatch):
    monkeypatch.delenv("METEOMATICS_USERNAME", raising=False)
    monkeypatch.delenv("METEOMATICS_PASSWORD", raising=False)
