"""Request log table written by ``LoggingMiddleware``."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String

from revenue_monitor.core.database import Base


class Log(Base):
    """One API request: what was asked, how it ended and how long it took."""

    __tablename__ = "log"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=datetime.now, index=True)
    method = Column(String(10), nullable=False)
    path = Column(String(255), nullable=False)
    query_string = Column(String(1000))
    status_code = Column(Integer, nullable=False)
    client_ip = Column(String(45))
    processing_time = Column(Float)  # milliseconds
    user_agent = Column(String(255))
    hostname = Column(String(255))
    application_id = Column(String(100))
