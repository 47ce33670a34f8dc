"""Cache entry repository."""

from typing import Optional

from sqlalchemy.orm import Session

from pap.models.cache_entry import CacheEntryModel
from pap.repositories.base import BaseRepository


class CacheEntryRepository(BaseRepository[CacheEntryModel]):
    def __init__(self, db: Session):
        super().__init__(db, CacheEntryModel)

    def get_payload(self, key: str) -> Optional[str]:
        entry = self.get(key)
        return entry.payload if entry else None

    def put_payload(self, key: str, payload: str) -> CacheEntryModel:
        """Insert or overwrite the payload stored under ``key`` (caller commits)."""
        entry = self.get(key)
        if entry is None:
            return self.add(CacheEntryModel(key=key, payload=payload))
        entry.payload = payload
        self.db.flush()
        return entry
