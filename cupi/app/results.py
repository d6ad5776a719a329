from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from cupi.models.results import AccountErrorCode, AccountResult

ERROR_STATUS_CODES: dict[AccountErrorCode, int] = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "persistence_failure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: AccountResult) -> None:
    """Raise the HTTPException matching a failed result; no-op on success."""
    if result.success:
        return
    error = result.error or "persistence_failure"
    raise HTTPException(
        status_code=ERROR_STATUS_CODES[error],
        detail={"error": error, "message": result.message},
    )


def error_response(result: AccountResult) -> JSONResponse:
    """Build the JSON error response for a failed result.

    For routes that must still attach cookies to a failure.
    """
    error = result.error or "persistence_failure"
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[error],
        content={"detail": {"error": error, "message": result.message}},
    )
