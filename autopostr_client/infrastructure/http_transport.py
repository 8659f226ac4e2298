"""HTTP Transport — httpx-backed exchange with the single backend endpoint.

Invariants:
    - Every call is a POST with a text/plain JSON body (no CORS preflight)
    - Network failures and timeouts → TransportError("Failed to fetch: ...")
    - Non-2xx status → TransportError("HTTP <status>: <reason>") with status_code
    - Response text returned untouched: parsing belongs to core/envelope.py

Design Decisions:
    - httpx.AsyncClient injected or owned: tests pass a MockTransport-backed client
    - follow_redirects=True: script endpoints answer POSTs with a 302 to the result
"""

import logging

import httpx

from autopostr_client.core.errors import TransportError

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain;charset=utf-8"


def build_endpoint_url(base_url: str, api_key: str) -> str:
    """Endpoint URL with the shared static credential as the `key` query parameter."""
    return str(httpx.URL(base_url).copy_merge_params({"key": api_key}))


class HttpxTransport:
    """Transport implementation over httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True,
        )

    async def send(self, url: str, body: str) -> str:
        try:
            response = await self._client.post(
                url,
                content=body.encode("utf-8"),
                headers={"Content-Type": CONTENT_TYPE},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch: {e}")
        return self._checked_text(response)

    async def probe(self, url: str) -> str:
        """Plain GET of the endpoint (status check)."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch: {e}")
        return response.text

    def _checked_text(self, response: httpx.Response) -> str:
        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
