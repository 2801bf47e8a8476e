"""Data Access Objects for the logging module."""

from typing import List

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from revenue_monitor.core.base_dao import BaseDAO
from revenue_monitor.logging.models import Log


class LogDAO(BaseDAO[Log]):
    """DAO for request log rows."""

    def __init__(self, db_session: Session):
        super().__init__(Log, db_session)

    def record(self, **fields) -> Log:
        """Persist one request log entry."""
        log = Log(**fields)
        self.db.add(log)
        self.db.commit()
        return log

    def get_recent_logs(self, limit: int = 100) -> List[Log]:
        query = select(Log).order_by(desc(Log.timestamp), desc(Log.id)).limit(limit)
        return list(self.db.execute(query).scalars().all())
