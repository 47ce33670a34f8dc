"""Data access repositories."""

from pap.repositories.base import BaseRepository
from pap.repositories.cache_entry_repo import CacheEntryRepository

__all__ = ["BaseRepository", "CacheEntryRepository"]
