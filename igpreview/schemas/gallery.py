from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

class GalleryPhotoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    caption: Optional[str] = None
    tags: Optional[List[str]] = None
    signed_url: str = Field(alias='signedUrl')

class GalleryOut(BaseModel):
    photos: List[GalleryPhotoOut]
    total: int

class ErrorOut(BaseModel):
    error: str
