# revenue_monitor/core/base_service.py
"""Generic base service for read-only business logic orchestration."""

from abc import ABC
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from revenue_monitor.core.base_dao import BaseDAO

ModelType = TypeVar("ModelType")
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class BaseService(Generic[ModelType, ResponseSchemaType], ABC):
    """Generic service that shapes DAO records into response schemas."""

    response_model: Type[ResponseSchemaType]

    def __init__(self, dao: BaseDAO[ModelType]):
        self.dao = dao

    def get_by_id(self, id: int) -> Optional[ResponseSchemaType]:
        """Get record by ID; ``None`` when it does not exist."""
        record = self.dao.get_by_id(id)
        if record:
            return self._to_response(record)
        return None

    def _to_response(self, record: ModelType) -> ResponseSchemaType:
        """Convert database model to response schema. Override for complex transformations."""
        return self.response_model.model_validate(record)

    def _to_responses(self, records: List[ModelType]) -> List[ResponseSchemaType]:
        return [self._to_response(record) for record in records]
