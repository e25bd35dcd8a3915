from fastapi import status

from tenant_access.domain.errors import ErrorCode
from tenant_access.libs.result import Error

# Result error code -> HTTP status for client errors
CLIENT_ERROR_STATUS = {
    ErrorCode.malformed_credential.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.invalid_role.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.invalid_expiry.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.invalid_business_name.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.auth_error.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.unauthorized.value: status.HTTP_403_FORBIDDEN,
    ErrorCode.email_mismatch.value: status.HTTP_403_FORBIDDEN,
    ErrorCode.not_found.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.already_used.value: status.HTTP_409_CONFLICT,
    ErrorCode.already_registered.value: status.HTTP_409_CONFLICT,
    ErrorCode.invitation_already_exists.value: status.HTTP_409_CONFLICT,
    ErrorCode.expired.value: status.HTTP_410_GONE,
    ErrorCode.transient_error.value: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def raise_for_error(error: Error, overrides: dict = None) -> None:
    """Raise the HTTP-layer exception matching a use case error"""
    status_code = (overrides or {}).get(error.code) or CLIENT_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
