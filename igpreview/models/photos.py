import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, func
from . import Base

class Photo(Base):
    __tablename__ = 'photos'
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    feed_id = Column(String(36), ForeignKey('feeds.id', ondelete='CASCADE'), index=True, nullable=False)
    storage_path = Column(String, nullable=False)
    caption = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    # not unique: ties fall back to created_at, then id
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
