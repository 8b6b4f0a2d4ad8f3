from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class PreviewOut(BaseModel):
    token: str
    url: str
    expires_at: Optional[datetime] = None
