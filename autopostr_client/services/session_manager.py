"""Session Manager — owns the authenticated session, its persistence, expiry, and refresh.

Invariants:
    - States: ANONYMOUS (no session), ACTIVE (not expired), EXPIRED (transient,
      collapses to ANONYMOUS on the next expiry check)
    - The session changes only on successful login/register/refresh, and is
      cleared on logout or detected expiry
    - expires_at_ms = now + session_timeout at login/register; refresh never extends it
    - Persisted as three KV entries written expiry-last and cleared expiry-first,
      so any partial state reads as "no session"
    - is_authenticated() compares the persisted expiry with now at call time
    - logout() is idempotent and always clears every cached response
    - A refresh that settles after logout (or a new login) never resurrects
      the old session
    - Session mutations (establish, logout clear, refresh adopt) run under one
      lock, so a store write that suspends never interleaves with another
    - Expiry detection is local: it logs out, it never raises

Design Decisions:
    - start()/close() own the periodic tasks (refresh every 5 min, expiry check
      every 1 min) through a Scheduler, tied to this instance's lifecycle
    - Refresh failures are logged and reported as None: refresh is background work
    - Listeners observe every session change (new Session or None)
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from autopostr_client.core.domain_types import NoticeLevel, SessionStatus, StorageKey
from autopostr_client.core.errors import ClientError, ParseError
from autopostr_client.core.protocols import Clock, KeyValueStore, Notifier, now_ms
from autopostr_client.core.session_model import (
    Session, new_session, session_from_entries, session_to_entries,
)
from autopostr_client.infrastructure.scheduler import Scheduler
from autopostr_client.services.backend_api import BackendApi

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT_MS = 24 * 60 * 60 * 1000
DEFAULT_REFRESH_INTERVAL_MS = 5 * 60 * 1000
DEFAULT_EXPIRY_CHECK_INTERVAL_MS = 60 * 1000

REFRESH_TASK = "session.refresh"
EXPIRY_CHECK_TASK = "session.expiry_check"

LOGIN_NOTICE = "Login successful!"
REGISTER_NOTICE = "Registration successful! Welcome to AutoPostr."
EXPIRED_NOTICE = "Your session has expired. Please login again."

SessionListener = Callable[[Session | None], None]


def normalize_email(email: str) -> str:
    return email.strip().lower()


def extract_user(result: dict[str, Any]) -> dict[str, Any] | None:
    """User record from a login/register ({user}) or profile ({profile: {user}}) response."""
    profile = result.get("profile")
    if isinstance(profile, dict) and isinstance(profile.get("user"), dict):
        return profile["user"]
    user = result.get("user")
    return user if isinstance(user, dict) else None


class SessionManager:
    """Authenticated-session lifecycle over BackendApi and a KeyValueStore."""

    def __init__(
        self,
        backend: BackendApi,
        store: KeyValueStore,
        clock: Clock,
        *,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        session_timeout_ms: int = DEFAULT_SESSION_TIMEOUT_MS,
        refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS,
        expiry_check_interval_ms: int = DEFAULT_EXPIRY_CHECK_INTERVAL_MS,
    ):
        self._backend = backend
        self._store = store
        self._clock = clock
        self._scheduler = scheduler or Scheduler(clock)
        self._notifier = notifier
        self._session_timeout_ms = session_timeout_ms
        self._refresh_interval_ms = refresh_interval_ms
        self._expiry_check_interval_ms = expiry_check_interval_ms
        self._session: Session | None = None
        self._listeners: list[SessionListener] = []
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "SessionManager":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ─── Queries ─────────────────────────────────────────────────

    @property
    def current_session(self) -> Session | None:
        return self._session

    @property
    def current_identity(self) -> str | None:
        return self._session.email if self._session else None

    @property
    def status(self) -> SessionStatus:
        if self._session is None:
            return SessionStatus.ANONYMOUS
        if self._session.is_expired(now_ms(self._clock)):
            return SessionStatus.EXPIRED
        return SessionStatus.ACTIVE

    async def is_authenticated(self) -> bool:
        if self._session is None:
            return False
        expiry = await self._store.get(StorageKey.SESSION_EXPIRY.value)
        if not expiry:
            return False
        try:
            return now_ms(self._clock) <= int(expiry)
        except ValueError:
            return False

    async def require_auth(self) -> bool:
        """True if authenticated; otherwise logs out (consistent cleared state)."""
        if not await self.is_authenticated():
            await self.logout()
            return False
        return True

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Observe session changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ─── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        """Restore the persisted session, drop it if expired, start periodic tasks."""
        self._session = await self._load()
        if self._session is not None:
            logger.info(
                "Restored persisted session",
                extra={"identity": self._session.email},
            )
        await self.check_expiry()
        self._start_timers()

    async def close(self) -> None:
        self._scheduler.cancel(REFRESH_TASK)
        self._scheduler.cancel(EXPIRY_CHECK_TASK)

    # ─── Operations ──────────────────────────────────────────────

    async def login(self, email: str) -> Session:
        result = await self._backend.login_user(normalize_email(email))
        session = self._session_from(result)
        await self._establish(session)
        logger.info("Login successful", extra={"identity": session.email})
        self._notice(LOGIN_NOTICE, NoticeLevel.SUCCESS)
        return session

    async def register(self, user_data: dict[str, Any]) -> Session:
        data = dict(user_data)
        if isinstance(data.get("email"), str):
            data["email"] = normalize_email(data["email"])
        result = await self._backend.register_user(data)
        session = self._session_from(result)
        await self._establish(session)
        logger.info("Registration successful", extra={"identity": session.email})
        self._notice(REGISTER_NOTICE, NoticeLevel.SUCCESS)
        return session

    async def logout(self) -> None:
        async with self._lock:
            previous = self._session
            self._session = None
            await self._clear_persisted()
            self._backend.clear_cache()
        if previous is not None:
            logger.info("Logged out", extra={"identity": previous.email})
            self._emit(None)

    async def refresh(self) -> Session | None:
        """Re-read the user profile; keeps the expiry. None if skipped or failed."""
        session = self._session
        if session is None or not await self.is_authenticated():
            return None
        try:
            result = await self._backend.get_user_profile(session.email)
        except ClientError as e:
            logger.warning(
                f"Failed to refresh user data: {e.message}",
                extra={"identity": session.email, "error_code": e.code},
            )
            return None
        user = extract_user(result)
        if user is None:
            logger.warning(
                "Profile response carried no user record",
                extra={"identity": session.email},
            )
            return None
        async with self._lock:
            if self._session is not session:
                return None
            refreshed = session.with_identity(user)
            await self._persist(refreshed)
            self._session = refreshed
        self._emit(refreshed)
        return refreshed

    async def check_expiry(self) -> bool:
        """Log out if a session is held but no longer authenticated. True if it did."""
        if self._session is None or await self.is_authenticated():
            return False
        logger.info("Session expired", extra={"identity": self._session.email})
        self._notice(EXPIRED_NOTICE, NoticeLevel.WARNING)
        await self.logout()
        return True

    # ─── Internals ───────────────────────────────────────────────

    def _session_from(self, result: dict[str, Any]) -> Session:
        user = extract_user(result)
        if user is None or not user.get("email"):
            raise ParseError("Authentication response carried no user record")
        return new_session(user, now_ms(self._clock), self._session_timeout_ms)

    async def _establish(self, session: Session) -> None:
        async with self._lock:
            await self._persist(session)
            self._session = session
        self._start_timers()
        self._emit(session)

    def _start_timers(self) -> None:
        self._scheduler.schedule(
            REFRESH_TASK, self._refresh_interval_ms / 1000, self.refresh,
        )
        self._scheduler.schedule(
            EXPIRY_CHECK_TASK, self._expiry_check_interval_ms / 1000, self.check_expiry,
        )

    async def _load(self) -> Session | None:
        entries = {key: await self._store.get(key.value) for key in StorageKey}
        session = session_from_entries(entries)
        if session is None and any(entries.values()):
            logger.warning("Clearing partial persisted session")
            await self._clear_persisted()
        return session

    async def _persist(self, session: Session) -> None:
        for key, value in session_to_entries(session).items():
            await self._store.set(key.value, value)

    async def _clear_persisted(self) -> None:
        await self._store.delete(StorageKey.SESSION_EXPIRY.value)
        await self._store.delete(StorageKey.USER_DATA.value)
        await self._store.delete(StorageKey.USER_EMAIL.value)

    def _emit(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.error("Session listener failed", exc_info=True)

    def _notice(self, message: str, level: NoticeLevel) -> None:
        if self._notifier is not None:
            self._notifier.notify(message, level.value)
