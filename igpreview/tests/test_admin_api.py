import pytest
from sqlalchemy import select

from igpreview import uploads
from igpreview.models.feeds import Feed
from igpreview.models.photos import Photo


async def feed_photos(session_factory):
    async with session_factory() as fresh:
        res = await fresh.execute(select(Photo).order_by(Photo.order_index, Photo.created_at))
        return list(res.scalars().all())


@pytest.mark.asyncio
async def test_admin_api_requires_a_session(client):
    res = await client.get('/api/admin/feed')
    assert res.status_code == 401

    res = await client.get('/api/admin/feed', headers={'Authorization': 'Bearer not-a-jwt'})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_feed_is_created_once_on_first_visit(client, session_factory, admin_headers):
    first = await client.get('/api/admin/feed', headers=admin_headers)
    second = await client.get('/api/admin/feed', headers=admin_headers)

    assert first.status_code == 200
    assert first.json()['title'] == 'Draft IG Grid'
    assert first.json()['id'] == second.json()['id']
    async with session_factory() as fresh:
        feeds = (await fresh.execute(select(Feed))).scalars().all()
    assert len(feeds) == 1


@pytest.mark.asyncio
async def test_upload_multiple_photos(client, session_factory, objects, admin_headers, png_image):
    res = await client.post(
        '/api/admin/photos',
        headers=admin_headers,
        files=[('files', ('a.png', png_image, 'image/png')), ('files', ('b.png', png_image, 'image/png'))],
        data={'caption': 'Launch', 'tags': '#summer, beach ,'},
    )

    assert res.status_code == 200, res.text
    body = res.json()
    assert [p['order_index'] for p in body] == [0, 1]
    assert body[0]['tags'] == ['summer', 'beach']
    stored = await feed_photos(session_factory)
    assert len(stored) == 2
    assert set(objects.objects) == {p.storage_path for p in stored}


@pytest.mark.asyncio
async def test_upload_rejects_non_images(client, objects, admin_headers):
    res = await client.post(
        '/api/admin/photos',
        headers=admin_headers,
        files=[('files', ('notes.png', b'definitely not a png', 'image/png'))],
    )
    assert res.status_code == 400
    assert objects.objects == {}

    res = await client.post(
        '/api/admin/photos',
        headers=admin_headers,
        files=[('files', ('script.exe', b'MZ', 'application/octet-stream'))],
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_upload_over_size_limit_is_rejected(client, objects, admin_headers, png_image, monkeypatch):
    monkeypatch.setattr(uploads, 'MAX_UPLOAD_SIZE', len(png_image) - 1)
    res = await client.post(
        '/api/admin/photos',
        headers=admin_headers,
        files=[('files', ('big.png', png_image, 'image/png'))],
    )
    assert res.status_code == 400
    assert 'too large' in res.json()['detail']
    assert objects.objects == {}


@pytest.mark.asyncio
async def test_feed_lists_photos_with_signed_urls(client, objects, admin_headers, png_image):
    await client.post('/api/admin/photos', headers=admin_headers,
                      files=[('files', ('a.png', png_image, 'image/png'))])
    await client.post('/api/admin/photos', headers=admin_headers,
                      files=[('files', ('b.png', png_image, 'image/png'))])
    broken_key = next(iter(objects.objects))
    objects.failing.add(broken_key)

    res = await client.get('/api/admin/feed', headers=admin_headers)

    photos = res.json()['photos']
    assert len(photos) == 2
    by_path = {p['storage_path']: p['signed_url'] for p in photos}
    assert by_path[broken_key] is None
    assert sum(1 for url in by_path.values() if url) == 1


@pytest.mark.asyncio
async def test_edit_caption_and_tags(client, admin_headers, png_image):
    uploaded = await client.post('/api/admin/photos', headers=admin_headers,
                                 files=[('files', ('a.png', png_image, 'image/png'))])
    photo_id = uploaded.json()[0]['id']

    res = await client.patch(f'/api/admin/photos/{photo_id}', headers=admin_headers,
                             json={'caption': 'Golden hour', 'tags': ['sunset']})

    assert res.status_code == 200
    assert res.json()['caption'] == 'Golden hour'
    assert res.json()['tags'] == ['sunset']


@pytest.mark.asyncio
async def test_delete_photo(client, session_factory, objects, admin_headers, png_image):
    uploaded = await client.post('/api/admin/photos', headers=admin_headers,
                                 files=[('files', ('a.png', png_image, 'image/png'))])
    photo = uploaded.json()[0]

    res = await client.delete(f"/api/admin/photos/{photo['id']}", headers=admin_headers)

    assert res.status_code == 200
    assert objects.removed == [photo['storage_path']]
    assert await feed_photos(session_factory) == []

    missing = await client.delete(f"/api/admin/photos/{photo['id']}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_reports_storage_failure(client, session_factory, objects, admin_headers, png_image):
    uploaded = await client.post('/api/admin/photos', headers=admin_headers,
                                 files=[('files', ('a.png', png_image, 'image/png'))])
    photo = uploaded.json()[0]
    objects.failing.add(photo['storage_path'])

    res = await client.delete(f"/api/admin/photos/{photo['id']}", headers=admin_headers)

    assert res.status_code == 502
    assert len(await feed_photos(session_factory)) == 1


@pytest.mark.asyncio
async def test_reorder_moves_first_photo_to_end(client, session_factory, admin_headers, png_image):
    ids = []
    for name in ('a.png', 'b.png', 'c.png'):
        res = await client.post('/api/admin/photos', headers=admin_headers,
                                files=[('files', (name, png_image, 'image/png'))])
        ids.append(res.json()[0]['id'])
    a, b, c = ids

    res = await client.post('/api/admin/photos/reorder', headers=admin_headers,
                            json={'active_id': a, 'over_id': c})

    assert res.status_code == 200
    assert res.json()['photo_ids'] == [b, c, a]
    stored = {p.id: p.order_index for p in await feed_photos(session_factory)}
    assert stored == {b: 0, c: 1, a: 2}


@pytest.mark.asyncio
async def test_generated_link_opens_gallery_with_new_upload(client, admin_headers, png_image):
    uploaded = await client.post('/api/admin/photos', headers=admin_headers,
                                 files=[('files', ('a.png', png_image, 'image/png'))])
    photo_id = uploaded.json()[0]['id']

    res = await client.post('/api/admin/previews', headers=admin_headers)

    assert res.status_code == 200
    link = res.json()
    assert link['url'] == f"http://test/preview/{link['token']}"
    assert link['expires_at'] is not None

    gallery = await client.get('/api/signed-urls', params={'token': link['token']})
    assert [p['id'] for p in gallery.json()['photos']] == [photo_id]
