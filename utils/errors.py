class ServiceError(Exception):
    """Base error for failures surfaced to API callers as a JSON body."""
    status_code = 500
    code = 'internal_error'

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """Missing, oversized or otherwise unacceptable input."""
    status_code = 400
    code = 'validation_error'


class AuthenticationError(ServiceError):
    status_code = 401
    code = 'unauthorized'


class NotFoundError(ServiceError):
    status_code = 404
    code = 'not_found'


class DataIntegrityError(ServiceError):
    """Stored payload is missing, malformed or cannot be decoded."""
    status_code = 500
    code = 'data_integrity_error'

    def __init__(self, message: str, resource_id: str, code: str | None = None):
        super().__init__(message, code=code)
        self.resource_id = resource_id


class UpstreamAuthError(ServiceError):
    """The identity provider rejected or failed a request."""
    status_code = 500
    code = 'upstream_auth_error'


class StorageError(ServiceError):
    """The key-value backend failed."""
    status_code = 500
    code = 'storage_error'
