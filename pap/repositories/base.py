"""Generic base repository over a single-key SQLAlchemy model."""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from pap.database import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Thin data-access layer over SQLAlchemy.

    Repositories only modify the session (add/flush); the caller decides
    when to commit or roll back.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def get(self, key: Any) -> Optional[T]:
        return self.db.get(self.model, key)

    def add(self, obj: T) -> T:
        self.db.add(obj)
        self.db.flush()
        return obj
