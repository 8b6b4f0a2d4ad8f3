from .models.feeds import Feed
from .models.photos import Photo
from .models.previews import Preview
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional

DEFAULT_FEED_TITLE = 'Draft IG Grid'

# feeds
async def get_first_feed(session: AsyncSession) -> Optional[Feed]:
    q = await session.execute(select(Feed).order_by(Feed.created_at.asc(), Feed.id.asc()).limit(1))
    return q.scalars().first()

async def create_feed(session: AsyncSession, title: Optional[str] = DEFAULT_FEED_TITLE) -> Feed:
    feed = Feed(title=title)
    session.add(feed)
    await session.commit()
    await session.refresh(feed)
    return feed

async def get_or_create_feed(session: AsyncSession) -> Feed:
    """The single feed an admin curates, created on first use."""
    feed = await get_first_feed(session)
    if feed:
        return feed
    return await create_feed(session)

# photos
async def list_feed_photos(session: AsyncSession, feed_id: str) -> List[Photo]:
    q = select(Photo).where(Photo.feed_id == feed_id).order_by(
        Photo.order_index.asc(), Photo.created_at.asc(), Photo.id.asc()
    )
    res = await session.execute(q)
    return list(res.scalars().all())

async def count_feed_photos(session: AsyncSession, feed_id: str) -> int:
    res = await session.execute(select(func.count(Photo.id)).where(Photo.feed_id == feed_id))
    return res.scalar_one()

async def get_photo(session: AsyncSession, photo_id: str, feed_id: Optional[str] = None) -> Optional[Photo]:
    q = select(Photo).where(Photo.id == photo_id)
    if feed_id:
        q = q.where(Photo.feed_id == feed_id)
    res = await session.execute(q)
    return res.scalars().first()

async def insert_photo(session: AsyncSession, feed_id: str, storage_path: str, order_index: int,
                       caption: Optional[str] = None, tags: Optional[List[str]] = None) -> Photo:
    photo = Photo(feed_id=feed_id, storage_path=storage_path, order_index=order_index, caption=caption, tags=tags)
    session.add(photo)
    await session.commit()
    await session.refresh(photo)
    return photo

async def update_photo_order(session: AsyncSession, photo_id: str, order_index: int) -> None:
    photo = await session.get(Photo, photo_id)
    if not photo:
        return
    photo.order_index = order_index
    await session.commit()

async def update_photo_details(session: AsyncSession, photo: Photo, caption: Optional[str], tags: Optional[List[str]]) -> Photo:
    photo.caption = caption
    photo.tags = tags
    await session.commit()
    await session.refresh(photo)
    return photo

async def delete_photo_record(session: AsyncSession, photo: Photo) -> None:
    await session.delete(photo)
    await session.commit()

# previews
async def insert_preview(session: AsyncSession, feed_id: str, token: str, expires_at: Optional[datetime]) -> Preview:
    preview = Preview(feed_id=feed_id, token=token, expires_at=expires_at)
    session.add(preview)
    await session.commit()
    await session.refresh(preview)
    return preview

async def get_preview_by_token(session: AsyncSession, token: str) -> Optional[Preview]:
    q = await session.execute(select(Preview).where(Preview.token == token))
    return q.scalars().first()
