"""Shared test fixtures for the vmgateway test suite.

Provides a fake in-process govc, bridges wired to it, and a FastAPI
test client that never spawns a real process.
"""

from __future__ import annotations

from typing import Callable, Sequence

import pytest
from fastapi.testclient import TestClient

from vmgateway.api.server import create_app
from vmgateway.bridge.invoker import CallableRunner, InvocationBridge
from vmgateway.config.settings import Settings

VM_ROOT = "/dc/vm/"
VM_LISTING = "/dc/vm/\n/dc/vm/web1\n/dc/vm/db1\n"


class FakeGovc:
    """In-process stand-in for govc that prints a canned listing."""

    def __init__(self, output: str = VM_LISTING, exit_code: int = 0) -> None:
        self.output = output
        self.exit_code = exit_code
        self.calls: list[list[str]] = []

    def __call__(self, args: Sequence[str]) -> int:
        self.calls.append(list(args))
        print(self.output, end="")
        return self.exit_code


# ---------------------------------------------------------------------------
# Bridge Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_govc() -> FakeGovc:
    return FakeGovc()


@pytest.fixture
def make_bridge() -> Callable[..., InvocationBridge]:
    """Factory building a bridge around an in-process callable."""

    def _make(func: Callable[[Sequence[str]], int]) -> InvocationBridge:
        return InvocationBridge(CallableRunner(func))

    return _make


@pytest.fixture
def fake_bridge(fake_govc: FakeGovc) -> InvocationBridge:
    return InvocationBridge(CallableRunner(fake_govc))


# ---------------------------------------------------------------------------
# API Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(vm_path=VM_ROOT)


@pytest.fixture
def client(settings: Settings, fake_bridge: InvocationBridge) -> TestClient:
    """A test client with the fake govc bridge injected."""
    app = create_app(settings=settings, bridge=fake_bridge)
    return TestClient(app)
