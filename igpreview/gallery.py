"""
Gallery Read API
Resolves a preview token into the feed's ordered photos with short-lived signed URLs
"""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from .core import SIGNING_FAILURES
from .crud import list_feed_photos
from .errors import PreviewError, RecordStoreError
from .models.photos import Photo
from .previews import validate_preview
from .schemas.gallery import GalleryOut, GalleryPhotoOut
from .storage import ObjectStore, SIGNED_URL_TTL_SECONDS

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}


async def sign_photos(objects: ObjectStore, photos: Sequence[Photo],
                      expires_in: int = SIGNED_URL_TTL_SECONDS) -> List[Tuple[Photo, Optional[str]]]:
    """Request a signed URL for every photo concurrently.

    Results keep the input order. A photo whose signing fails is paired with None.
    """
    results = await asyncio.gather(
        *(objects.create_signed_url(photo.storage_path, expires_in) for photo in photos),
        return_exceptions=True,
    )
    signed = []
    for photo, result in zip(photos, results):
        if isinstance(result, Exception):
            SIGNING_FAILURES.inc()
            logger.error(f"Error creating signed URL for photo {photo.id}: {result}")
            result = None
        elif isinstance(result, BaseException):
            raise result
        signed.append((photo, result))
    return signed


async def resolve_gallery(session: AsyncSession, objects: ObjectStore, token: str,
                          now: Optional[datetime] = None) -> GalleryOut:
    try:
        feed_id = await validate_preview(session, token, now=now)
        photos = await list_feed_photos(session, feed_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching photos: {e}")
        raise RecordStoreError() from e

    signed = await sign_photos(objects, photos)
    items = [
        GalleryPhotoOut(id=photo.id, caption=photo.caption, tags=photo.tags, signed_url=url)
        for photo, url in signed
        if url
    ]
    return GalleryOut(photos=items, total=len(items))


async def signed_urls_response(token: Optional[str], session: AsyncSession, objects: ObjectStore) -> Tuple[int, dict]:
    """Status code and JSON body for the signed-urls endpoint, shared by every transport."""
    if not token:
        return 400, {'error': 'Token is required'}
    try:
        gallery = await resolve_gallery(session, objects, token)
    except PreviewError as e:
        return e.status_code, {'error': e.message}
    except Exception:
        logger.exception("Unexpected error resolving preview")
        return 500, {'error': 'Internal server error'}
    return 200, gallery.model_dump(by_alias=True)
