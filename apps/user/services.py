import logging
from typing import Optional

import httpx
from fastapi import Request

from config.settings import SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY
from apps.user.schema import Identity
from utils.errors import AuthenticationError, UpstreamAuthError

logger = logging.getLogger(__name__)


def _auth_url(path: str) -> str:
    return f'{SUPABASE_URL}/auth/v1{path}'


def _headers(api_key: str, token: Optional[str] = None) -> dict:
    return {
        'apikey': api_key,
        'Authorization': f'Bearer {token or api_key}',
        'Content-Type': 'application/json',
    }


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f'HTTP {resp.status_code}'
    if isinstance(body, dict):
        for field in ('msg', 'message', 'error_description', 'error'):
            if body.get(field):
                return str(body[field])
    return f'HTTP {resp.status_code}'


async def _call(method: str, path: str, headers: dict, **kwargs):
    try:
        async with httpx.AsyncClient() as client:
            return await client.request(method, _auth_url(path), headers=headers, **kwargs)
    except httpx.HTTPError as e:
        logger.error('Identity provider unreachable: %s', e)
        raise UpstreamAuthError(f'Identity provider unavailable: {e}') from e


def _session_payload(body: dict) -> dict:
    if not isinstance(body, dict) or not body.get('access_token'):
        raise UpstreamAuthError('Identity provider returned no session')
    return {
        'access_token': body['access_token'],
        'refresh_token': body.get('refresh_token'),
        'user': body.get('user') or {},
    }


async def create_user(email: str, password: str, name: Optional[str] = None) -> dict:
    """Create a confirmed account with the privileged key."""
    resp = await _call(
        'POST', '/admin/users',
        headers=_headers(SUPABASE_SERVICE_ROLE_KEY),
        json={
            'email': email,
            'password': password,
            'user_metadata': {'name': name or ''},
            # no mail server is configured, so confirm straight away
            'email_confirm': True,
        },
    )
    if resp.status_code not in (200, 201):
        message = _error_message(resp)
        logger.error('Error creating user %s: %s', email, message)
        raise UpstreamAuthError(message, status_code=400)
    user = resp.json()
    if not isinstance(user, dict) or not user.get('id'):
        raise UpstreamAuthError('Failed to create user')
    return user


async def sign_in(email: str, password: str) -> dict:
    resp = await _call(
        'POST', '/token',
        headers=_headers(SUPABASE_ANON_KEY),
        params={'grant_type': 'password'},
        json={'email': email, 'password': password},
    )
    if resp.status_code != 200:
        message = _error_message(resp)
        logger.warning('Sign-in rejected for %s: %s', email, message)
        raise UpstreamAuthError(message, status_code=400)
    return _session_payload(resp.json())


async def refresh_session(refresh_token: str) -> dict:
    resp = await _call(
        'POST', '/token',
        headers=_headers(SUPABASE_ANON_KEY),
        params={'grant_type': 'refresh_token'},
        json={'refresh_token': refresh_token},
    )
    if resp.status_code != 200:
        raise UpstreamAuthError(_error_message(resp), status_code=400)
    return _session_payload(resp.json())


async def get_user(token: str) -> Optional[dict]:
    """Resolve an access token to its user, or None if the provider rejects it."""
    resp = await _call('GET', '/user', headers=_headers(SUPABASE_ANON_KEY, token))
    if resp.status_code in (401, 403):
        return None
    if resp.status_code != 200:
        raise UpstreamAuthError(f'Token validation failed: {_error_message(resp)}')
    return resp.json()


async def sign_out(token: str) -> None:
    resp = await _call('POST', '/logout', headers=_headers(SUPABASE_ANON_KEY, token))
    if resp.status_code not in (200, 204):
        logger.warning('Provider sign-out returned %s: %s', resp.status_code, _error_message(resp))


def bearer_token(request: Request) -> str:
    auth = request.headers.get('authorization') or request.headers.get('Authorization')
    if not auth or not auth.lower().startswith('bearer '):
        raise AuthenticationError('Missing or invalid authorization header')
    token = auth.split(None, 1)[1].strip()
    if not token:
        raise AuthenticationError('Missing or invalid authorization header')
    return token


async def require_auth(request: Request) -> Identity:
    """Bearer token check delegated to the identity provider."""
    token = bearer_token(request)
    user = await get_user(token)
    if not user or not user.get('id'):
        raise AuthenticationError('Invalid token')
    return Identity(id=user['id'], email=user.get('email'))
