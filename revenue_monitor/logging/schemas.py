"""Pydantic schemas for the logging module."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LogRead(BaseModel):
    """A stored API request log entry."""

    id: int
    timestamp: Optional[datetime] = None
    method: str
    path: str
    query_string: Optional[str] = None
    status_code: int
    client_ip: Optional[str] = None
    processing_time: Optional[float] = None
    user_agent: Optional[str] = None
    hostname: Optional[str] = None
    application_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
