import os
import logging
import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from typing import Iterable, Optional
from .errors import StorageError

logger = logging.getLogger(__name__)

STORAGE_BUCKET = os.getenv('STORAGE_BUCKET', 'photos')
# Set for S3-compatible stores (MinIO, Supabase storage, R2); unset means AWS
STORAGE_ENDPOINT_URL = os.getenv('STORAGE_ENDPOINT_URL') or None
STORAGE_REGION = os.getenv('STORAGE_REGION') or os.getenv('AWS_REGION', 'us-east-1')
SIGNED_URL_TTL_SECONDS = int(os.getenv('SIGNED_URL_TTL_SECONDS', '3600'))


class ObjectStore:
    """Photo bytes keyed by path, plus time-limited signed download URLs."""

    def __init__(self, bucket: str = STORAGE_BUCKET, endpoint_url: Optional[str] = STORAGE_ENDPOINT_URL,
                 region: str = STORAGE_REGION, session: Optional[aioboto3.Session] = None):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region
        self.session = session or aioboto3.Session()

    def _client(self):
        return self.session.client('s3', region_name=self.region,
                                   endpoint_url=self.endpoint_url,
                                   aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                                   aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                                   config=Config(signature_version='s3v4'))

    async def upload(self, key: str, body: bytes, content_type: str) -> None:
        try:
            async with self._client() as client:
                await client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(key, str(e)) from e

    async def create_signed_url(self, key: str, expires_in: int = SIGNED_URL_TTL_SECONDS) -> str:
        try:
            async with self._client() as client:
                url = await client.generate_presigned_url('get_object',
                                                         Params={'Bucket': self.bucket, 'Key': key},
                                                         ExpiresIn=expires_in)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(key, str(e)) from e
        if not url:
            raise StorageError(key, 'empty signed url')
        return url

    async def remove(self, keys: Iterable[str]) -> None:
        async with self._client() as client:
            for key in keys:
                try:
                    await client.delete_object(Bucket=self.bucket, Key=key)
                except (BotoCoreError, ClientError) as e:
                    raise StorageError(key, str(e)) from e


def get_object_store() -> ObjectStore:
    # fresh client per request
    return ObjectStore()
