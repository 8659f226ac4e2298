"""Service test fixtures — one fully wired ClientContext over fakes.

Invariants:
    - No network and no real time: FakeTransport + ManualClock
    - Every fixture is function-scoped (fresh state per test)
"""

import pytest

from autopostr_client.bootstrap import wire_context
from autopostr_client.config import Settings
from autopostr_client.infrastructure.kv_store import InMemoryKeyValueStore
from tests.services.fakes import FakeTransport, ManualClock, RecordingNotifier

BACKEND_URL = "https://backend.test/exec"


def make_settings(**overrides) -> Settings:
    return Settings(
        _env_file=None,
        backend_url=BACKEND_URL,
        backend_api_key="test-key",
        **overrides,
    )


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def transport(clock):
    return FakeTransport(clock)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def context(settings, clock, store, transport, notifier):
    return wire_context(
        settings, clock=clock, store=store, transport=transport, notifier=notifier,
    )


@pytest.fixture
def api_client(context):
    return context.api_client


@pytest.fixture
def backend(context):
    return context.backend


@pytest.fixture
async def manager(context):
    manager = context.session_manager
    await manager.start()
    yield manager
    await manager.close()
