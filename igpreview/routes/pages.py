"""
Server-rendered pages: landing, admin console and the public preview gallery
"""

import logging
from pathlib import Path
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from ..errors import PreviewError, RecordStoreError
from ..gallery import resolve_gallery
from ..identity import SESSION_COOKIE, IdentityClient, IdentityError, get_identity_client, get_optional_admin
from ..models import get_session
from ..previews import PREVIEW_TTL_SECONDS
from ..storage import ObjectStore, get_object_store
from .admin import load_feed

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / 'templates'))


@router.get('/')
async def index(request: Request):
    return templates.TemplateResponse(request, 'index.html')


@router.get('/admin')
async def admin_page(
    request: Request,
    admin: Optional[dict] = Depends(get_optional_admin),
    session: AsyncSession = Depends(get_session),
    objects: ObjectStore = Depends(get_object_store),
):
    if not admin:
        return templates.TemplateResponse(request, 'sign_in.html', {'error': None})
    try:
        feed = await load_feed(session, objects)
    except Exception as e:
        logger.error(f"Error loading feed: {e}")
        return templates.TemplateResponse(request, 'admin.html', {'feed': None, 'admin': admin,
                                                                  'error': 'Could not load the feed.'},
                                          status_code=500)
    return templates.TemplateResponse(request, 'admin.html', {
        'feed': feed,
        'admin': admin,
        'error': None,
        'preview_ttl_minutes': PREVIEW_TTL_SECONDS // 60,
    })


@router.post('/admin/sign-in')
async def sign_in(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    identity: IdentityClient = Depends(get_identity_client),
):
    try:
        tokens = await identity.sign_in(email, password)
    except IdentityError as e:
        logger.info({'msg': 'sign_in_rejected', 'status': e.status_code})
        return templates.TemplateResponse(request, 'sign_in.html', {'error': e.message}, status_code=401)
    response = RedirectResponse('/admin', status_code=303)
    response.set_cookie(SESSION_COOKIE, tokens['access_token'], httponly=True, samesite='lax',
                        secure=request.url.scheme == 'https', max_age=tokens.get('expires_in'))
    return response


@router.post('/admin/sign-out')
async def sign_out(
    admin: Optional[dict] = Depends(get_optional_admin),
    identity: IdentityClient = Depends(get_identity_client),
):
    if admin:
        try:
            await identity.sign_out(admin['token'])
        except Exception as e:
            # the local session is dropped regardless
            logger.warning(f"Provider sign out failed: {e}")
    response = RedirectResponse('/admin', status_code=303)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get('/preview/{token}')
async def preview_page(
    request: Request,
    token: str,
    session: AsyncSession = Depends(get_session),
    objects: ObjectStore = Depends(get_object_store),
):
    context = {'token': token, 'photos': [], 'error': None, 'client_fetch': False}
    try:
        gallery = await resolve_gallery(session, objects, token)
    except RecordStoreError as e:
        logger.error(f"Error rendering preview: {e}")
        context['client_fetch'] = True
        return templates.TemplateResponse(request, 'preview.html', context)
    except PreviewError as e:
        context['error'] = e.message
        return templates.TemplateResponse(request, 'preview.html', context, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Error rendering preview: {e}")
        context['client_fetch'] = True
        return templates.TemplateResponse(request, 'preview.html', context)
    context['photos'] = [p.model_dump(by_alias=True) for p in gallery.photos]
    return templates.TemplateResponse(request, 'preview.html', context)
