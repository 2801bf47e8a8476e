# revenue_monitor/core/schemas.py
"""Uniform response envelope shared by every API endpoint."""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, model_serializer

DataType = TypeVar("DataType")


class ApiResponse(BaseModel, Generic[DataType]):
    """``{success, data, count?, error?}``; ``count`` and ``error`` are omitted when unset."""

    success: bool = True
    data: Optional[DataType] = None
    count: Optional[int] = None
    error: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_empty_meta(self, handler) -> Dict[str, Any]:
        payload = handler(self)
        for key in ("count", "error"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


def envelope(data: Any, with_count: bool = False) -> Dict[str, Any]:
    """Wrap a successful result; list results get ``count`` = ``len(data)``."""
    payload = {"success": True, "data": data}
    if with_count:
        payload["count"] = len(data)
    return payload


def error_envelope(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}
