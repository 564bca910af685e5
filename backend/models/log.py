from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from database import Base

# Audit trail of catalog mutations
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)

    # Ids and before/after values of the change
    meta = Column(JSON, nullable=True)
