"""Backend API — typed facade naming the endpoint's operations.

Invariants:
    - Mutating operations (register, login, token.save, post.create) are never cached
    - Read operations are cacheable with per-operation TTLs (profile 60s, lists/stats 30s)
    - clear_user_cache(email) removes only entries whose key mentions that email
"""

from typing import Any

from autopostr_client.core.domain_types import Operation
from autopostr_client.core.envelope import CallOptions
from autopostr_client.core.request_key import key_mentions
from autopostr_client.services.api_client import ApiClient

PROFILE_TTL_MS = 60_000
LIST_TTL_MS = 30_000


class BackendApi:
    """One method per backend operation."""

    def __init__(
        self,
        client: ApiClient,
        profile_ttl_ms: int = PROFILE_TTL_MS,
        list_ttl_ms: int = LIST_TTL_MS,
    ):
        self.client = client
        self._profile_read = CallOptions(cacheable=True, ttl_ms=profile_ttl_ms)
        self._list_read = CallOptions(cacheable=True, ttl_ms=list_ttl_ms)

    # ─── Users ───────────────────────────────────────────────────

    async def register_user(self, user_data: dict[str, Any]) -> dict[str, Any]:
        return await self.client.call(Operation.USER_REGISTER.value, user_data)

    async def login_user(self, email: str) -> dict[str, Any]:
        return await self.client.call(Operation.USER_LOGIN.value, {"email": email})

    async def get_user_profile(self, email: str) -> dict[str, Any]:
        return await self.client.call(
            Operation.USER_PROFILE.value, {"email": email}, self._profile_read,
        )

    # ─── Tokens ──────────────────────────────────────────────────

    async def save_token(self, token_data: dict[str, Any]) -> dict[str, Any]:
        return await self.client.call(Operation.TOKEN_SAVE.value, token_data)

    async def get_user_tokens(self, email: str) -> dict[str, Any]:
        return await self.client.call(
            Operation.TOKEN_LIST.value, {"email": email}, self._list_read,
        )

    # ─── Posts ───────────────────────────────────────────────────

    async def schedule_post(self, post_data: dict[str, Any]) -> dict[str, Any]:
        return await self.client.call(Operation.POST_CREATE.value, post_data)

    async def get_user_posts(
        self, email: str, filters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self.client.call(
            Operation.POST_LIST.value, {"email": email, **(filters or {})},
            self._list_read,
        )

    async def get_user_stats(self, email: str) -> dict[str, Any]:
        return await self.client.call(
            Operation.POST_STATS.value, {"email": email}, self._list_read,
        )

    # ─── Cache & status ──────────────────────────────────────────

    def clear_user_cache(self, email: str) -> int:
        return self.client.invalidate(lambda key: key_mentions(key, email))

    def clear_cache(self) -> int:
        return self.client.clear_cache()

    async def get_status(self) -> dict[str, Any]:
        return await self.client.status()
