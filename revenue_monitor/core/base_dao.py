# revenue_monitor/core/base_dao.py
"""Generic base DAO for common read operations."""

from abc import ABC
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from revenue_monitor.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType], ABC):
    """Generic DAO for common database reads."""

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def _equality_conditions(self, filters: dict) -> List[Any]:
        conditions = []
        for key, value in filters.items():
            if hasattr(self.model, key) and value is not None:
                conditions.append(getattr(self.model, key) == value)
        return conditions

    def get_all(self, order_by: Sequence[Any] = (), limit: Optional[int] = None, **filters) -> List[ModelType]:
        """Get all records with optional equality filtering and ordering."""
        query = select(self.model)

        conditions = self._equality_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        if order_by:
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)

        result = self.db.execute(query)
        return list(result.scalars().all())

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get record by primary key."""
        return self.db.get(self.model, id)

    def count(self, **filters) -> int:
        """Count records with optional equality filtering."""
        query = select(func.count()).select_from(self.model)

        conditions = self._equality_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        return self.db.execute(query).scalar_one()
