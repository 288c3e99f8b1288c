"""Shared pytest fixtures for the ferretlib test suite."""

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running tests excluded by run_tests.py")


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def fixture_path():
    """Return a function resolving a fixture file name to its path."""
    def resolve(name: str) -> Path:
        path = FIXTURES_DIR / name
        assert path.exists(), f"missing fixture {name}"
        return path
    return resolve
