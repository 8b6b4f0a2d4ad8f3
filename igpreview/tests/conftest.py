import io
import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# In-memory SQLite stands in for Postgres; set before the app modules are imported
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite://')

# Ensure the package root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from httpx import AsyncClient, ASGITransport  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from igpreview.crud import create_feed, insert_photo  # noqa: E402
from igpreview.errors import StorageError  # noqa: E402
from igpreview.identity import create_access_token  # noqa: E402
from igpreview.models import Base, get_session  # noqa: E402
from igpreview.storage import get_object_store  # noqa: E402


class FakeObjectStore:
    """In-process object store; keys listed in ``failing`` raise StorageError."""

    def __init__(self, failing=()):
        self.objects = {}
        self.failing = set(failing)
        self.removed = []

    async def upload(self, key, body, content_type):
        if key in self.failing:
            raise StorageError(key, 'upload rejected')
        self.objects[key] = (body, content_type)

    async def create_signed_url(self, key, expires_in=3600):
        if key in self.failing:
            raise StorageError(key, 'signing failed')
        return f'https://storage.test/photos/{key}?expires_in={expires_in}'

    async def remove(self, keys):
        for key in keys:
            if key in self.failing:
                raise StorageError(key, 'remove rejected')
            self.objects.pop(key, None)
            self.removed.append(key)


def png_bytes(color='red') -> bytes:
    buf = io.BytesIO()
    Image.new('RGB', (8, 8), color).save(buf, format='PNG')
    return buf.getvalue()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine('sqlite+aiosqlite://', poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def objects():
    return FakeObjectStore()


@pytest.fixture
def make_feed(session):
    async def _make(title='Draft IG Grid'):
        return await create_feed(session, title=title)
    return _make


@pytest.fixture
def make_photo(session):
    async def _make(feed, order_index, name=None, caption=None, tags=None):
        path = f'{feed.id}/{name or order_index}.jpg'
        return await insert_photo(session, feed.id, path, order_index, caption=caption, tags=tags)
    return _make


@pytest.fixture
def admin_token():
    return create_access_token({'sub': 'admin-1', 'email': 'owner@example.com'})


@pytest.fixture
def admin_headers(admin_token):
    return {'Authorization': f'Bearer {admin_token}'}


@pytest_asyncio.fixture
async def client(session_factory, objects):
    from igpreview.main import app

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_object_store] = lambda: objects
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def png_image():
    return png_bytes()
