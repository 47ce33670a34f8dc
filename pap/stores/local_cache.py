"""Local cache store: the on-device copy of both collections.

Each collection is one JSON array stored in the ``cache_entries`` table
under its primary key. Older releases used other key names, so reads
probe an ordered list of aliases and the first non-empty match wins.
Writes always go to the primary key.

Neither operation raises. Corrupt payloads read as empty, failed writes
are logged and reported as ``False``.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pap.repositories.cache_entry_repo import CacheEntryRepository

logger = logging.getLogger(__name__)

# Primary key first, then historical names in priority order
COLLECTION_KEYS: Dict[str, Tuple[str, ...]] = {
    "claims": ("pap_claims_v1", "pap_claims", "claims"),
    "claimants": ("pap_claimants_v1", "pap_claimants", "claimants"),
}


class UnknownCollectionError(KeyError):
    pass


class LocalCacheStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def load(self, collection: str) -> List[Dict[str, Any]]:
        """Return the cached entities for ``collection`` or ``[]``."""
        keys = _keys(collection)
        try:
            with self._session_factory() as session:
                repo = CacheEntryRepository(session)
                for key in keys:
                    items = _decode(key, repo.get_payload(key))
                    if items:
                        if key != keys[0]:
                            logger.info("Read %s from legacy cache key %s", collection, key)
                        return items
        except SQLAlchemyError as exc:
            logger.warning("Local cache read failed for %s: %s", collection, exc)
        return []

    def save(self, collection: str, entities: List[Dict[str, Any]]) -> bool:
        """Overwrite the cached copy of ``collection``. Returns success."""
        key = _keys(collection)[0]
        try:
            payload = json.dumps(entities, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Cannot serialize %s for local cache: %s", collection, exc)
            return False

        session = self._session_factory()
        try:
            CacheEntryRepository(session).put_payload(key, payload)
            session.commit()
            return True
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Local cache write failed for %s: %s", collection, exc)
            return False
        finally:
            session.close()


def _keys(collection: str) -> Tuple[str, ...]:
    try:
        return COLLECTION_KEYS[collection]
    except KeyError:
        raise UnknownCollectionError(collection) from None


def _decode(key: str, payload) -> List[Dict[str, Any]]:
    if not payload:
        return []
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        logger.warning("Discarding unparseable cache entry %s", key)
        return []
    if not isinstance(data, list):
        logger.warning("Discarding cache entry %s: expected a list, got %s", key, type(data).__name__)
        return []
    return [item for item in data if isinstance(item, dict)]
