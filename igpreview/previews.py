"""
Preview Token Service
Issues opaque, time-bounded preview tokens for a feed and validates them at read time
"""
import os
import secrets
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from .crud import insert_preview, get_preview_by_token
from .core import PREVIEWS_ISSUED, PREVIEW_REJECTIONS
from .errors import PreviewNotFound, PreviewExpired
from .models.previews import Preview

logger = logging.getLogger(__name__)

PREVIEW_TTL_SECONDS = int(os.getenv('PREVIEW_TTL_SECONDS', '3600'))
PREVIEW_TTL = timedelta(seconds=PREVIEW_TTL_SECONDS)
PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL')

_UNSET = object()

def generate_preview_token() -> str:
    # 256-bit random token, URL-safe
    return secrets.token_urlsafe(32)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """Stores without timezone support hand back naive UTC timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def is_expired(preview: Preview, now: datetime) -> bool:
    # valid up to and including expires_at
    return preview.expires_at is not None and as_utc(preview.expires_at) < now

async def issue_preview(session: AsyncSession, feed_id: str, ttl=_UNSET, now: Optional[datetime] = None) -> Preview:
    """Create a new preview for a feed.

    Every call inserts a fresh row; outstanding previews are never reused.
    Pass ``ttl=None`` for a link that never expires.
    """
    if ttl is _UNSET:
        ttl = PREVIEW_TTL
    now = now or utcnow()
    expires_at = now + ttl if ttl is not None else None
    preview = await insert_preview(session, feed_id, generate_preview_token(), expires_at)
    PREVIEWS_ISSUED.inc()
    logger.info({'msg': 'preview_issued', 'feed_id': feed_id, 'expires_at': expires_at.isoformat() if expires_at else None})
    return preview

async def validate_preview(session: AsyncSession, token: str, now: Optional[datetime] = None) -> str:
    """Resolve a token to its feed id.

    Raises PreviewNotFound for unknown tokens and PreviewExpired for tokens past
    their expiry. This is a single read; nothing is marked or deleted.
    """
    preview = await get_preview_by_token(session, token)
    if not preview:
        PREVIEW_REJECTIONS.labels(reason='not_found').inc()
        raise PreviewNotFound()
    if is_expired(preview, now or utcnow()):
        PREVIEW_REJECTIONS.labels(reason='expired').inc()
        raise PreviewExpired()
    return preview.feed_id

def preview_url(token: str, base_url: Optional[str] = None) -> str:
    base = (PUBLIC_BASE_URL or base_url or '').rstrip('/')
    return f'{base}/preview/{token}'
