import os
import logging
import httpx
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, Request
from typing import Optional

logger = logging.getLogger(__name__)

# Access tokens are issued by the external identity provider and verified here
SECRET = os.getenv('IDENTITY_JWT_SECRET', 'devsecret')
ALGORITHM = os.getenv('IDENTITY_JWT_ALGORITHM', 'HS256')
AUDIENCE = os.getenv('IDENTITY_JWT_AUDIENCE', 'authenticated')
IDENTITY_URL = os.getenv('IDENTITY_URL', 'http://localhost:54321')
IDENTITY_API_KEY = os.getenv('IDENTITY_API_KEY', '')
SESSION_COOKIE = os.getenv('SESSION_COOKIE_NAME', 'igpreview_session')


class IdentityError(Exception):
    """The identity provider rejected a request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def create_access_token(data: dict, expires_delta: timedelta = None):
    """Mint a token in the format the identity provider issues."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode.setdefault('aud', AUDIENCE)
    to_encode.update({'exp': expire})
    return jwt.encode(to_encode, SECRET, algorithm=ALGORITHM)

def decode_token(token: str):
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM], audience=AUDIENCE)
        return payload
    except JWTError:
        return None


class IdentityClient:
    """Password sign-in and sign-out against a GoTrue-compatible auth API."""

    def __init__(self, base_url: str = IDENTITY_URL, api_key: str = IDENTITY_API_KEY,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, headers={'apikey': self.api_key},
                                 transport=self.transport, timeout=10.0)

    async def sign_in(self, email: str, password: str) -> dict:
        async with self._client() as client:
            res = await client.post('/auth/v1/token', params={'grant_type': 'password'},
                                    json={'email': email, 'password': password})
        if res.status_code >= 400:
            try:
                body = res.json()
            except ValueError:
                body = {}
            message = body.get('error_description') or body.get('msg') or 'Sign in failed'
            raise IdentityError(res.status_code, message)
        return res.json()

    async def sign_out(self, access_token: str) -> None:
        async with self._client() as client:
            res = await client.post('/auth/v1/logout', headers={'Authorization': f'Bearer {access_token}'})
        if res.status_code >= 400:
            raise IdentityError(res.status_code, 'Sign out failed')


def get_identity_client() -> IdentityClient:
    return IdentityClient()


def session_token(request: Request) -> Optional[str]:
    auth = request.headers.get('Authorization', '')
    if auth.lower().startswith('bearer '):
        return auth[7:].strip()
    return request.cookies.get(SESSION_COOKIE)

def get_optional_admin(request: Request) -> Optional[dict]:
    token = session_token(request)
    if not token:
        return None
    payload = decode_token(token)
    if not payload or not payload.get('sub'):
        return None
    return {'id': payload['sub'], 'email': payload.get('email'), 'token': token}

def get_current_admin(admin: Optional[dict] = Depends(get_optional_admin)) -> dict:
    if not admin:
        raise HTTPException(status_code=401, detail='Not authenticated')
    return admin
