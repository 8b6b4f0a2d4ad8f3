from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from ..gallery import CORS_HEADERS, signed_urls_response
from ..models import get_session
from ..schemas.gallery import GalleryOut, ErrorOut
from ..storage import ObjectStore, get_object_store

router = APIRouter()

@router.options('/signed-urls')
async def signed_urls_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)

@router.get('/signed-urls', response_model=GalleryOut,
            responses={400: {'model': ErrorOut}, 404: {'model': ErrorOut}, 410: {'model': ErrorOut}, 500: {'model': ErrorOut}})
async def signed_urls(token: Optional[str] = None,
                      session: AsyncSession = Depends(get_session),
                      objects: ObjectStore = Depends(get_object_store)):
    """Ordered photos of the previewed feed with short-lived signed URLs"""
    status, body = await signed_urls_response(token, session, objects)
    return JSONResponse(body, status_code=status, headers=CORS_HEADERS)

@router.api_route('/signed-urls', methods=['POST', 'PUT', 'PATCH', 'DELETE'], include_in_schema=False)
async def signed_urls_method_not_allowed():
    return JSONResponse({'error': 'Method not allowed'}, status_code=405, headers=CORS_HEADERS)
