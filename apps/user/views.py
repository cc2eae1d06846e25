import logging

from fastapi import Request

from apps.user.schema import LoginRequest, RefreshRequest, SignupRequest
from apps.user.services import bearer_token, create_user, refresh_session, require_auth, sign_in, sign_out
from utils.errors import UpstreamAuthError, ValidationError

logger = logging.getLogger(__name__)


async def health():
    return {'status': 'ok'}


async def signup(data: SignupRequest):
    if not data.email or not data.password:
        raise ValidationError('Email and password are required', code='missing_fields')

    user = await create_user(data.email, data.password, data.name)
    try:
        session = await sign_in(data.email, data.password)
    except UpstreamAuthError as e:
        logger.error('Error signing in after signup: %s', e)
        raise UpstreamAuthError('User created but failed to sign in. Please try logging in.',
                                status_code=500) from e

    return {
        'success': True,
        'user': user,
        'access_token': session['access_token'],
        'refresh_token': session['refresh_token'],
    }


async def login(data: LoginRequest):
    if not data.email or not data.password:
        raise ValidationError('Email and password are required', code='missing_fields')
    session = await sign_in(data.email, data.password)
    return {'success': True, **session}


async def refresh(data: RefreshRequest):
    if not data.refresh_token:
        raise ValidationError('refresh_token is required', code='missing_fields')
    session = await refresh_session(data.refresh_token)
    return {'success': True, **session}


async def logout(request: Request):
    await require_auth(request)
    await sign_out(bearer_token(request))
    return {'success': True}
