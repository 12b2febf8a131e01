"""Configuration file for pytest containing fixtures and configuration.

This module provides fixtures that can be used across multiple test files:
- isolated_config: clears the config cache and PIPECHECK_* overrides around every test
- valid_pipeline: a small valid pipeline document
"""

import os
from collections.abc import Iterator

import pytest

from pipecheck.compiler.config_loader import clear_config_cache


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep configuration lookups independent of the environment and of each other."""
    for name in list(os.environ):
        if name.startswith("PIPECHECK_"):
            monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def valid_pipeline() -> str:
    """A pipeline that validates with no errors."""
    return """\
input:
  kafka:
    addresses: [localhost:9092]
    topics: [events]
    consumer_group: pipecheck
pipeline:
  processors:
    - mapping: |
        root = this
        root.id = uuid_v4()
output:
  stdout: {}
"""
