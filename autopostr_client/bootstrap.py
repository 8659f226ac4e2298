"""Client Context — explicit construction and wiring of every client component.

Invariants:
    - One ClientContext per process/front end; components receive collaborators
      by constructor (no module-level instances)
    - The auth middleware reads the same KV store the SessionManager writes
    - start() restores the session and starts its timers; aclose() stops timers
      and releases the transport and database engine

Design Decisions:
    - build_context(settings) for production wiring; tests build ClientContext
      directly from fakes
"""

import logging
from dataclasses import dataclass

from autopostr_client.config import Settings
from autopostr_client.core.protocols import Clock, KeyValueStore, Notifier, Transport
from autopostr_client.infrastructure.clock import AsyncioClock
from autopostr_client.infrastructure.database import DatabaseSessionManager
from autopostr_client.infrastructure.http_transport import (
    HttpxTransport, build_endpoint_url,
)
from autopostr_client.infrastructure.kv_store import SqlKeyValueStore
from autopostr_client.infrastructure.scheduler import Scheduler
from autopostr_client.services.api_client import ApiClient
from autopostr_client.services.backend_api import BackendApi
from autopostr_client.services.middleware import (
    AuthInjectionMiddleware, ErrorClassificationMiddleware,
)
from autopostr_client.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class ClientContext:
    """Every long-lived client component, wired together."""
    clock: Clock
    store: KeyValueStore
    transport: Transport
    api_client: ApiClient
    backend: BackendApi
    session_manager: SessionManager
    db_manager: DatabaseSessionManager | None = None

    async def start(self) -> None:
        if self.db_manager is not None:
            await self.db_manager.init_schema()
        await self.session_manager.start()
        logger.info("Client context started")

    async def aclose(self) -> None:
        await self.session_manager.close()
        aclose = getattr(self.transport, "aclose", None)
        if aclose is not None:
            await aclose()
        if self.db_manager is not None:
            await self.db_manager.dispose()
        logger.info("Client context closed")

    async def storage_ready(self) -> bool:
        if self.db_manager is None:
            return True
        return await self.db_manager.health_check()


def wire_context(
    settings: Settings,
    *,
    clock: Clock,
    store: KeyValueStore,
    transport: Transport,
    notifier: Notifier | None = None,
    db_manager: DatabaseSessionManager | None = None,
) -> ClientContext:
    """Compose ApiClient → BackendApi → SessionManager over the given capabilities."""
    api_client = ApiClient(
        transport,
        clock,
        endpoint_url=build_endpoint_url(settings.backend_url, settings.backend_api_key),
        base_url=settings.backend_url,
        middlewares=[
            AuthInjectionMiddleware(store),
            ErrorClassificationMiddleware(notifier),
        ],
        retry_policy=settings.retry_policy(),
        default_ttl_ms=settings.default_cache_ttl_ms,
        operation_field=settings.envelope_operation_field,
    )
    backend = BackendApi(
        api_client,
        profile_ttl_ms=settings.profile_cache_ttl_ms,
        list_ttl_ms=settings.default_cache_ttl_ms,
    )
    session_manager = SessionManager(
        backend,
        store,
        clock,
        scheduler=Scheduler(clock),
        notifier=notifier,
        session_timeout_ms=settings.session_timeout_ms,
        refresh_interval_ms=settings.session_refresh_interval_ms,
        expiry_check_interval_ms=settings.session_expiry_check_interval_ms,
    )
    return ClientContext(
        clock=clock,
        store=store,
        transport=transport,
        api_client=api_client,
        backend=backend,
        session_manager=session_manager,
        db_manager=db_manager,
    )


def build_context(settings: Settings, notifier: Notifier | None = None) -> ClientContext:
    """Production wiring: wall clock, httpx transport, SQL-backed KV store."""
    db_manager = DatabaseSessionManager(settings.database_url)
    return wire_context(
        settings,
        clock=AsyncioClock(),
        store=SqlKeyValueStore(db_manager),
        transport=HttpxTransport(timeout_seconds=settings.request_timeout_seconds),
        notifier=notifier,
        db_manager=db_manager,
    )
