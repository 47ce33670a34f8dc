"""Cache entry ORM model: one JSON payload per cache key."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from pap.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntryModel(Base):
    __tablename__ = "cache_entries"

    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)  # JSON text, parsed by the store
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<CacheEntry key={self.key} bytes={len(self.payload or '')}>"
