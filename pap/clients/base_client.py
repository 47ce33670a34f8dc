"""Reusable async base for external HTTP API clients."""

import logging
from typing import Any, Optional

import httpx

from pap.utils.retry import with_retry

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    httpx.HTTPStatusError,
    httpx.TimeoutException,
    httpx.NetworkError,
)


class ClientNotInitializedError(RuntimeError):
    pass


class BaseHTTPClient:
    """Thin wrapper around ``httpx.AsyncClient`` with logging and retry.

    The underlying client is created by :meth:`init` and closed by
    :meth:`dispose`; subclasses only implement domain methods.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry_max_attempts: int = 2,
        retry_initial_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_max_attempts = retry_max_attempts
        self._retry_initial_delay = retry_initial_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ── lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def dispose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    # ── HTTP helpers ─────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> Optional[httpx.Response]:
        """Send a request, retrying on 5xx, 429, timeouts and network errors.

        Returns None for 4xx responses (not retried). Raises the last
        error once retries are exhausted.
        """
        if self._client is None:
            raise ClientNotInitializedError(f"{type(self).__name__} used before init()")

        url = f"{self.base_url}/{path.lstrip('/')}"
        client = self._client

        @with_retry(
            max_attempts=self._retry_max_attempts,
            initial_delay=self._retry_initial_delay,
            retry_on=RETRYABLE_ERRORS,
        )
        async def _send() -> Optional[httpx.Response]:
            logger.debug("%s %s", method, url)
            resp = await client.request(method, url, params=params, json=json)
            if resp.status_code >= 500 or resp.status_code == 429:
                logger.warning("Retryable error %d from %s %s", resp.status_code, method, url)
                resp.raise_for_status()
            elif resp.status_code >= 400:
                logger.warning("Client error %d for %s %s - not retrying", resp.status_code, method, url)
                return None
            return resp

        return await _send()
