import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, func
from . import Base

class Preview(Base):
    __tablename__ = 'previews'
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    feed_id = Column(String(36), ForeignKey('feeds.id', ondelete='CASCADE'), index=True, nullable=False)
    token = Column(String(128), unique=True, index=True, nullable=False)
    # null means the link never expires
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
