"""Shared fixtures for refcheck tests."""
from pathlib import Path

import pytest

from refcheck.oracles.base import ExistenceOracle


class StaticOracle(ExistenceOracle):
    """Oracle over a fixed set of names, counting how often it was built."""

    kind = 'static'

    def __init__(self, names=(), **kwargs):
        super().__init__(**kwargs)
        self.names = list(names)
        self.builds = 0

    def _build(self):
        self.builds += 1
        return self.names


@pytest.fixture
def static_oracle():
    """Factory for StaticOracle instances."""
    return StaticOracle


@pytest.fixture
def php_file(tmp_path):
    """Write PHP source to a file under tmp_path and return its path."""
    def write(source: str, name: str = 'example.php') -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding='utf-8')
        return path

    return write
