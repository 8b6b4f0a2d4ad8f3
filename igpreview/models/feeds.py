import uuid
from sqlalchemy import Column, String, DateTime, func
from . import Base

class Feed(Base):
    __tablename__ = 'feeds'
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
