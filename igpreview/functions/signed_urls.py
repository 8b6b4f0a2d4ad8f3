"""
Managed-function entry point for the signed-urls endpoint.

Accepts the Netlify/Lambda event shape and returns ``{statusCode, headers, body}``.
Each invocation builds its own engine, session and object store.
"""
import asyncio
import json
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from ..gallery import CORS_HEADERS, signed_urls_response
from ..models import DATABASE_URL
from ..storage import ObjectStore

logger = logging.getLogger(__name__)

HEADERS = {**CORS_HEADERS, 'Content-Type': 'application/json'}


def _response(status: int, body) -> dict:
    return {'statusCode': status, 'headers': HEADERS, 'body': json.dumps(body) if body is not None else ''}


async def handle_event(event: dict, session_factory=None, objects: ObjectStore = None) -> dict:
    method = (event.get('httpMethod') or 'GET').upper()
    if method == 'OPTIONS':
        return _response(200, None)
    if method != 'GET':
        return _response(405, {'error': 'Method not allowed'})

    token = (event.get('queryStringParameters') or {}).get('token')
    engine = None
    if session_factory is None:
        engine = create_async_engine(DATABASE_URL, poolclass=NullPool)
        session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            status, body = await signed_urls_response(token, session, objects or ObjectStore())
    finally:
        if engine is not None:
            await engine.dispose()
    return _response(status, body)


def handler(event, context):
    return asyncio.run(handle_event(event))
