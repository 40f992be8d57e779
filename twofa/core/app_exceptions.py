"""HTTP-facing errors with a stable `{code, message, details}` body."""

from typing import Any

from fastapi import HTTPException, status

from twofa.core.errors import AccountNotFound, InvalidCode, NotEnrolled, StoreUnavailable, TwoFactorError


class AppError(HTTPException):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


def raise_app_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | list[Any] | None = None,
) -> None:
    raise AppError(status_code=status_code, code=code, message=message, details=details)


def app_error_from(exc: TwoFactorError) -> AppError:
    """Map a core failure to its public HTTP shape.

    Wrong code and missing enrollment collapse into one response so a caller
    cannot tell them apart.
    """
    if isinstance(exc, (InvalidCode, NotEnrolled)):
        return AppError(status.HTTP_400_BAD_REQUEST, "VERIFICATION_FAILED", "Verification failed")
    if isinstance(exc, AccountNotFound):
        return AppError(status.HTTP_404_NOT_FOUND, "NOT_FOUND", "Account not found")
    if isinstance(exc, StoreUnavailable):
        return AppError(status.HTTP_503_SERVICE_UNAVAILABLE, "STORE_UNAVAILABLE",
                        "Two-factor storage is temporarily unavailable")
    return AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Two-factor operation failed")
