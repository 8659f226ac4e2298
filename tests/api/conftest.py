"""Bridge API fixtures — FastAPI app over a fake-backed ClientContext.

Design Decisions:
    - httpx.ASGITransport: no server, no lifespan; the context is started here
    - Single-attempt retry policy: failures surface without driving the clock
"""

import httpx
import pytest

from autopostr_client.bootstrap import wire_context
from autopostr_client.config import Settings
from autopostr_client.infrastructure.kv_store import InMemoryKeyValueStore
from autopostr_client.main import create_app
from tests.services.fakes import FakeTransport, ManualClock, RecordingNotifier


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
async def context(transport, store, clock):
    settings = Settings(
        _env_file=None,
        backend_url="https://backend.test/exec",
        backend_api_key="test-key",
        retry_max_attempts=1,
    )
    context = wire_context(
        settings, clock=clock, store=store, transport=transport,
        notifier=RecordingNotifier(),
    )
    await context.start()
    yield context
    await context.aclose()


@pytest.fixture
async def client(context):
    app = create_app(context=context)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://bridge.test",
    ) as client:
        yield client
