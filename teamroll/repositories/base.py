"""
Base repository for the data access layer.

Repositories never commit. The draft engine owns the transaction, so one
engine call either writes everything it touched or nothing.

Example:
    class CoachRepository(BaseRepository[Coach]):
        def find_by_team(self, team_id: str) -> List[Coach]:
            return self.query().filter(Coach.team_id == team_id).all()
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, List, Any
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Shared lookups for one model.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The caller's session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    def query(self) -> Query:
        return self.db.query(self.model_type)

    def find_by_id(self, id: Any) -> Optional[T]:
        """Primary key lookup; served from the identity map when possible."""
        return self.db.get(self.model_type, id)

    def find_all(self) -> List[T]:
        return self.query().all()

    def where_first(self, *criterion) -> Optional[T]:
        return self.query().filter(*criterion).first()

    def exists_where(self, *criterion) -> bool:
        return self.db.query(self.query().filter(*criterion).exists()).scalar()

    def count(self, *criterion) -> int:
        query = self.db.query(func.count()).select_from(self.model_type)
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    def create(self, **kwargs) -> T:
        """Add a new row to the session. Nothing is flushed."""
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance
