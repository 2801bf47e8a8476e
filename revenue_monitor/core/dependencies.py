# revenue_monitor/core/dependencies.py
"""Shared FastAPI dependencies"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from revenue_monitor.core.config import Settings
from revenue_monitor.core.database import get_db


def get_settings(request: Request) -> Settings:
    """Settings the running application was built with"""
    return request.app.state.settings


SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
