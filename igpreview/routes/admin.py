"""
Admin Routes
Feed curation for the signed-in owner: upload, edit, delete, reorder and preview links
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, File, UploadFile, Form, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from ..crud import get_or_create_feed, list_feed_photos, get_photo, update_photo_details
from ..errors import StorageError
from ..feed_manager import upload_photo, delete_photo, move_photo, persist_order
from ..gallery import sign_photos
from ..identity import get_current_admin
from ..models import get_session
from ..previews import issue_preview, preview_url
from ..schemas.photos import FeedOut, PhotoOut, PhotoDetailsIn, ReorderIn, ReorderOut, ActionOkOut
from ..schemas.previews import PreviewOut
from ..storage import ObjectStore, get_object_store
from ..uploads import read_upload, validate_image

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_tags(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    tags = [t.strip().lstrip('#') for t in raw.split(',')]
    return [t for t in tags if t] or None


async def load_feed(session: AsyncSession, objects: ObjectStore) -> FeedOut:
    """Feed with every photo; photos that could not be signed keep signed_url=None"""
    feed = await get_or_create_feed(session)
    photos = await list_feed_photos(session, feed.id)
    signed = await sign_photos(objects, photos)
    return FeedOut(
        id=feed.id,
        title=feed.title,
        created_at=feed.created_at,
        photos=[PhotoOut.model_validate(photo).model_copy(update={'signed_url': url}) for photo, url in signed],
    )


@router.get('/feed', response_model=FeedOut)
async def get_feed(
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
    objects: ObjectStore = Depends(get_object_store),
):
    return await load_feed(session, objects)


@router.post('/photos', response_model=List[PhotoOut])
async def upload_photos(
    files: List[UploadFile] = File(...),
    caption: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
    objects: ObjectStore = Depends(get_object_store),
):
    """Upload one or more photos to the end of the feed"""
    feed = await get_or_create_feed(session)
    uploaded = []
    try:
        for file in files:
            content = await read_upload(file)
            validate_image(file.filename, content)
            photo = await upload_photo(session, objects, feed, file.filename, content,
                                       content_type=file.content_type, caption=caption or None,
                                       tags=parse_tags(tags))
            uploaded.append(PhotoOut.model_validate(photo))
    except HTTPException:
        raise
    except StorageError as e:
        logger.error(f"Error uploading files: {e}")
        raise HTTPException(502, "Error uploading files. Please try again.")
    except Exception as e:
        logger.error(f"Error uploading files: {e}")
        raise HTTPException(500, "Error uploading files. Please try again.")
    return uploaded


@router.patch('/photos/{photo_id}', response_model=PhotoOut)
async def edit_photo(
    photo_id: str,
    payload: PhotoDetailsIn,
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
):
    feed = await get_or_create_feed(session)
    photo = await get_photo(session, photo_id, feed_id=feed.id)
    if not photo:
        raise HTTPException(404, "Photo not found")
    photo = await update_photo_details(session, photo, payload.caption, payload.tags)
    return PhotoOut.model_validate(photo)


@router.delete('/photos/{photo_id}', response_model=ActionOkOut)
async def remove_photo(
    photo_id: str,
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
    objects: ObjectStore = Depends(get_object_store),
):
    """Remove a photo from the object store, then from the feed"""
    feed = await get_or_create_feed(session)
    photo = await get_photo(session, photo_id, feed_id=feed.id)
    if not photo:
        raise HTTPException(404, "Photo not found")
    try:
        await delete_photo(session, objects, photo)
    except StorageError as e:
        logger.error(f"Error deleting photo {photo_id}: {e}")
        raise HTTPException(502, "Failed to delete photo")
    except Exception as e:
        logger.error(f"Error deleting photo {photo_id}: {e}")
        raise HTTPException(500, "Failed to delete photo")
    return ActionOkOut(message="Photo deleted")


@router.post('/photos/reorder', response_model=ReorderOut)
async def reorder_photos(
    payload: ReorderIn,
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
):
    """Apply a drag-and-drop move and rewrite order_index for the whole feed"""
    feed = await get_or_create_feed(session)
    photos = await list_feed_photos(session, feed.id)
    ordered = move_photo(photos, payload.active_id, payload.over_id)
    try:
        await persist_order(session, ordered)
    except Exception as e:
        logger.error(f"Error updating photo order: {e}")
        raise HTTPException(500, "Failed to update photo order")
    return ReorderOut(photo_ids=[p.id for p in ordered])


@router.post('/previews', response_model=PreviewOut)
async def generate_preview_link(
    request: Request,
    current_admin: dict = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
):
    """Issue a new time-limited preview link for the feed"""
    feed = await get_or_create_feed(session)
    try:
        preview = await issue_preview(session, feed.id)
    except Exception as e:
        logger.error(f"Error generating preview link: {e}")
        raise HTTPException(500, "Error generating preview link. Please try again.")
    return PreviewOut(
        token=preview.token,
        url=preview_url(preview.token, str(request.base_url)),
        expires_at=preview.expires_at,
    )
