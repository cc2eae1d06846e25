import functools
import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from utils.errors import ServiceError

logger = logging.getLogger(__name__)


def error_response(message: str, code: str, status_code: int) -> JSONResponse:
    return JSONResponse({'error': message, 'code': code}, status_code=status_code)


def response_wrapper(view, operation: str | None = None):
    """Map domain errors raised by ``view`` to JSON error bodies.

    The wrapped callable keeps the view's signature so FastAPI still
    resolves path, query, form and request parameters from it.
    """
    label = operation or view.__name__.replace('_', ' ').capitalize()

    @functools.wraps(view)
    async def wrapper(*args, **kwargs):
        try:
            return await view(*args, **kwargs)
        except ServiceError as exc:
            return error_response(exc.message, exc.code, exc.status_code)
        except HTTPException:
            raise
        except Exception as exc:
            logger.exception('Unhandled error in %s', view.__name__)
            return error_response(f'{label} failed: {exc}', 'internal_error', 500)

    return wrapper
