"""SQLAlchemy ORM models, imported here so Base.metadata sees them."""

from pap.models.cache_entry import CacheEntryModel

__all__ = ["CacheEntryModel"]
