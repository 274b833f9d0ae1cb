"""Root pytest configuration for all tests."""

from __future__ import annotations

import pytest

from shelltrack.config import reset_config
from shelltrack.logging import reset_logging
from shelltrack.shell import ShellIntegrationService, ShellIntegrationSession
from tests.utils import FakeTerminal, FakeTerminalRegistry, FakeTransport

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def _isolated_config():
    """Drop cached config and installed log handlers between tests."""
    reset_config()
    yield
    reset_config()
    reset_logging()


@pytest.fixture
def registry() -> FakeTerminalRegistry:
    return FakeTerminalRegistry()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def service(registry: FakeTerminalRegistry, transport: FakeTransport):
    svc = ShellIntegrationService(registry, transport)
    yield svc
    svc.dispose()


@pytest.fixture
def session() -> ShellIntegrationSession:
    return ShellIntegrationSession(FakeTerminal(1))
