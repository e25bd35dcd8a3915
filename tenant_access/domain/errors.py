"""
Error codes shared by the invitation and provisioning use cases.
"""

from enum import Enum
from typing import Any

from tenant_access.libs.result import Error


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers"""

    # Terminal validation errors
    malformed_credential = "MALFORMED_CREDENTIAL"
    not_found = "NOT_FOUND"
    already_used = "ALREADY_USED"
    expired = "EXPIRED"
    email_mismatch = "EMAIL_MISMATCH"

    already_registered = "ALREADY_REGISTERED"
    unauthorized = "UNAUTHORIZED"
    generation_exhausted = "GENERATION_EXHAUSTED"
    profile_provisioning_failed = "PROFILE_PROVISIONING_FAILED"
    transient_error = "TRANSIENT_ERROR"
    auth_error = "AUTH_ERROR"

    invalid_role = "INVALID_ROLE"
    invalid_expiry = "INVALID_EXPIRY"
    invitation_already_exists = "INVITATION_ALREADY_EXISTS"
    invalid_business_name = "INVALID_BUSINESS_NAME"


RETRYABLE_CODES = frozenset(
    {
        ErrorCode.transient_error.value,
        ErrorCode.profile_provisioning_failed.value,
    }
)


def error(code: ErrorCode, message: str, **details: Any) -> Error:
    return Error(code.value, message, details)


def transient_error(operation: str) -> Error:
    return error(
        ErrorCode.transient_error,
        f"{operation} did not complete in time, please retry",
        operation=operation,
    )
