# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Root pytest configuration with shared fixtures and markers.

This file is automatically loaded by pytest and provides:
- Custom markers for test categories
- Isolated registry fixtures and test doubles for the registry protocols
- Reset of the process-wide default registries around every test
"""

from dataclasses import dataclass, field
from typing import Any

import pytest

from rpc_registry.codec import CodecRegistry
from rpc_registry.plugin import PluginRegistry


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "concurrency: Mark test as exercising multi-threaded access",
    )


# ============================================================================
# Test Doubles
# ============================================================================


class FakeCodec:
    """Codec that passes bodies through unchanged."""

    def encode(self, message, body):
        return body

    def decode(self, message, buffer):
        return buffer


@dataclass
class FakeFactory:
    """Plugin factory with a fixed type that records setup() calls."""

    plugin_type: str = "log"
    setup_calls: list = field(default_factory=list)

    def type(self):
        return self.plugin_type

    def setup(self, name, decoder):
        cfg: dict[str, Any] = {}
        decoder.decode(cfg)
        self.setup_calls.append((name, cfg))


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_default_registries():
    """Give every test empty process-wide registries."""
    CodecRegistry.reset()
    PluginRegistry.reset()
    yield
    CodecRegistry.reset()
    PluginRegistry.reset()


@pytest.fixture
def codec_registry():
    """An isolated CodecRegistry."""
    return CodecRegistry()


@pytest.fixture
def plugin_registry():
    """An isolated PluginRegistry."""
    return PluginRegistry()


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def make_factory():
    """Build plugin factories reporting the given type."""
    return lambda plugin_type="log": FakeFactory(plugin_type=plugin_type)


@pytest.fixture
def log_factory(make_factory):
    return make_factory("log")
