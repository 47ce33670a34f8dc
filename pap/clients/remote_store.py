"""Firebase Realtime Database client for the two entity collections.

Documents live under ``{namespace}/{collection}`` keyed by entity id.
Every method degrades instead of raising: an unconfigured or unreachable
database yields empty lists and ``False``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

import httpx

from pap.clients.base_client import BaseHTTPClient, ClientNotInitializedError
from pap.utils.sanitize import strip_absent

logger = logging.getLogger(__name__)

CLAIMS = "claims"
CLAIMANTS = "claimants"
COLLECTIONS = (CLAIMS, CLAIMANTS)

_CREDENTIAL_RE = re.compile(r"^[0-9A-Za-z_.:\-]{20,}$")
_PLACEHOLDERS = {
    "YOUR_FIREBASE_AUTH_TOKEN",
    "YOUR_DATABASE_SECRET_HERE",
    "dummy-key-for-error-handling",
}

# Anything that can go wrong between us and the database
_REMOTE_ERRORS = (httpx.HTTPError, ClientNotInitializedError, ValueError)


@dataclass
class RemoteFetch:
    """Result of a collection read plus whether the database answered at all."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    reachable: bool = False


class RemoteStoreClient(BaseHTTPClient):
    """Bulk and per-document access to the hosted database over REST."""

    def __init__(
        self,
        database_url: str,
        auth_token: str,
        namespace: str = "pap",
        timeout: float = 10.0,
        retry_max_attempts: int = 2,
        retry_initial_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            base_url=(database_url or "").strip(),
            timeout=timeout,
            retry_max_attempts=retry_max_attempts,
            retry_initial_delay=retry_initial_delay,
            transport=transport,
        )
        self.database_url = (database_url or "").strip()
        self.auth_token = (auth_token or "").strip()
        self.namespace = namespace.strip("/")

    # ── configuration ────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """True only when both the URL and the credential look usable."""
        parsed = urlparse(self.database_url)
        if parsed.scheme != "https" or not parsed.netloc:
            return False
        if self.auth_token in _PLACEHOLDERS:
            return False
        return bool(_CREDENTIAL_RE.match(self.auth_token))

    async def init(self) -> None:
        if not self.is_configured():
            logger.warning("Remote store not configured; running on local cache only")
            return
        await super().init()

    # ── reads ────────────────────────────────────────────────────────

    async def fetch_all_with_status(self, collection: str) -> RemoteFetch:
        """Read a whole collection and report whether the database answered.

        An empty collection comes back as ``RemoteFetch([], reachable=True)``;
        an unreachable or unconfigured one as ``RemoteFetch([], reachable=False)``.
        """
        if not self.is_configured():
            return RemoteFetch()
        try:
            resp = await self._request("GET", self._path(collection), params=self._auth())
            if resp is None:
                return RemoteFetch()
            items = self._documents(resp.json())
        except _REMOTE_ERRORS as exc:
            logger.warning("Failed to fetch %s from remote store: %s", collection, exc)
            return RemoteFetch()
        if items is None:
            logger.warning("Malformed %s payload from remote store", collection)
            return RemoteFetch()
        return RemoteFetch(items=items, reachable=True)

    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        return (await self.fetch_all_with_status(collection)).items

    # ── writes ───────────────────────────────────────────────────────

    async def replace_all(self, collection: str, entities: List[Dict[str, Any]]) -> bool:
        """Overwrite the whole collection with ``entities`` keyed by id."""
        if not self.is_configured():
            return False
        documents: Dict[str, Any] = {}
        for entity in entities:
            entity_id = entity.get("id")
            if not entity_id:
                logger.warning("Skipping %s entity without id in bulk write", collection)
                continue
            documents[str(entity_id)] = entity
        return await self._write("PUT", self._path(collection), documents)

    async def upsert_one(self, collection: str, entity: Dict[str, Any]) -> bool:
        if not self.is_configured():
            return False
        entity_id = entity.get("id")
        if not entity_id:
            logger.warning("Refusing to upsert %s entity without id", collection)
            return False
        return await self._write("PUT", self._path(collection, str(entity_id)), entity)

    async def delete_one(self, collection: str, entity_id: str) -> bool:
        if not self.is_configured() or not entity_id:
            return False
        try:
            resp = await self._request(
                "DELETE", self._path(collection, entity_id), params=self._auth(silent=True)
            )
        except _REMOTE_ERRORS as exc:
            logger.warning("Failed to delete %s/%s from remote store: %s", collection, entity_id, exc)
            return False
        return resp is not None

    # ── internal ─────────────────────────────────────────────────────

    async def _write(self, method: str, path: str, payload: Any) -> bool:
        try:
            resp = await self._request(
                method, path, params=self._auth(silent=True), json=strip_absent(payload)
            )
        except _REMOTE_ERRORS as exc:
            logger.warning("Failed to write %s to remote store: %s", path, exc)
            return False
        return resp is not None

    def _path(self, collection: str, entity_id: Optional[str] = None) -> str:
        path = f"{self.namespace}/{collection}"
        if entity_id is not None:
            path += f"/{quote(entity_id, safe='')}"
        return f"{path}.json"

    def _auth(self, silent: bool = False) -> dict:
        params = {"auth": self.auth_token}
        if silent:
            params["print"] = "silent"
        return params

    @staticmethod
    def _documents(payload: Any) -> Optional[List[Dict[str, Any]]]:
        """Flatten a collection snapshot into a list of documents.

        The database answers ``null`` for an empty path, an object keyed
        by id normally, and an array when every key looks numeric (with
        holes as nulls). Anything else is malformed and returns None.
        """
        if payload is None:
            return []
        if isinstance(payload, dict):
            values = list(payload.values())
        elif isinstance(payload, list):
            values = [v for v in payload if v is not None]
        else:
            return None
        return [v for v in values if isinstance(v, dict)]
