"""
Feed Management
Upload, delete and reorder photos in the admin's feed.

None of these operations is atomic across the object store and the record store.
A failure between steps leaves an orphaned object or a partially rewritten order;
nothing is compensated.
"""
import logging
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from .crud import count_feed_photos, insert_photo, delete_photo_record, update_photo_order
from .models.feeds import Feed
from .models.photos import Photo
from .storage import ObjectStore
from .uploads import generate_storage_key, guess_content_type

logger = logging.getLogger(__name__)


async def upload_photo(session: AsyncSession, objects: ObjectStore, feed: Feed, filename: str, content: bytes,
                       content_type: Optional[str] = None, caption: Optional[str] = None,
                       tags: Optional[List[str]] = None) -> Photo:
    """Store the bytes, then append a photo record at the end of the feed."""
    key = generate_storage_key(feed.id, filename)
    await objects.upload(key, content, guess_content_type(filename, content_type))

    # append-only numbering, never renumbered after deletes
    order_index = await count_feed_photos(session, feed.id)
    try:
        photo = await insert_photo(session, feed.id, key, order_index, caption=caption, tags=tags)
    except Exception:
        logger.error({'msg': 'orphaned_object', 'key': key, 'feed_id': feed.id})
        raise
    logger.info({'msg': 'photo_uploaded', 'photo_id': photo.id, 'key': key, 'order_index': order_index})
    return photo


async def delete_photo(session: AsyncSession, objects: ObjectStore, photo: Photo) -> None:
    """Remove the stored object, then the record."""
    await objects.remove([photo.storage_path])
    try:
        await delete_photo_record(session, photo)
    except Exception:
        logger.error({'msg': 'record_without_object', 'photo_id': photo.id, 'key': photo.storage_path})
        raise
    logger.info({'msg': 'photo_deleted', 'photo_id': photo.id})


def move_photo(photos: Sequence[Photo], active_id: str, over_id: str) -> List[Photo]:
    """Return a new list with ``active_id`` moved to the position of ``over_id``."""
    items = list(photos)
    ids = [p.id for p in items]
    if active_id == over_id or active_id not in ids or over_id not in ids:
        return items
    old_index = ids.index(active_id)
    new_index = ids.index(over_id)
    items.insert(new_index, items.pop(old_index))
    return items


async def persist_order(session: AsyncSession, ordered: Sequence[Photo]) -> None:
    """Rewrite order_index to match list position, one committed update per photo.

    Updates applied before a failure stay applied.
    """
    for index, photo in enumerate(ordered):
        await update_photo_order(session, photo.id, index)
