from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

class PhotoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feed_id: str
    storage_path: str
    caption: Optional[str] = None
    tags: Optional[List[str]] = None
    order_index: int
    created_at: Optional[datetime] = None
    signed_url: Optional[str] = None

class FeedOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    photos: List[PhotoOut] = []

class PhotoDetailsIn(BaseModel):
    caption: Optional[str] = None
    tags: Optional[List[str]] = None

class ReorderIn(BaseModel):
    active_id: str
    over_id: str

class ReorderOut(BaseModel):
    photo_ids: List[str]

class ActionOkOut(BaseModel):
    ok: bool = True
    message: str
