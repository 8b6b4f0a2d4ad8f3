"""
Upload validation and storage key generation for feed photos
"""

import io
import os
import secrets
import mimetypes
from fastapi import HTTPException
from PIL import Image, UnidentifiedImageError

MAX_UPLOAD_SIZE = int(os.getenv('MAX_UPLOAD_SIZE', str(20 * 1024 * 1024)))  # 20MB
ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif'}


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or '')[1].lower()


def generate_storage_key(feed_id: str, filename: str) -> str:
    """Random object key scoped by feed id, keeping the original extension"""
    return f"{feed_id}/{secrets.token_urlsafe(16)}{file_extension(filename)}"


def guess_content_type(filename: str, declared: str = None) -> str:
    if declared and declared.startswith('image/'):
        return declared
    return mimetypes.guess_type(filename or '')[0] or 'application/octet-stream'


async def read_upload(file) -> bytes:
    """Read an UploadFile, stopping one byte past the size limit"""
    return await file.read(MAX_UPLOAD_SIZE + 1)


def validate_image(filename: str, content: bytes) -> None:
    """Validate uploaded image file"""
    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(400, f"File too large. Max size is {MAX_UPLOAD_SIZE // (1024 * 1024)}MB")

    if not content:
        raise HTTPException(400, "Empty file")

    file_ext = file_extension(filename)
    if file_ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(400, f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    # Check if it's a valid image by trying to open it
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        raise HTTPException(400, "Invalid image file")
