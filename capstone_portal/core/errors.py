"""
Error taxonomy and HTTP mapping.

- AdmissionDenied: an action broke an admission rule. Recoverable, nothing written.
- ProfileRejected: profile data failed a check that needs the store (role change,
  unknown department/domain).
- PyMongoError: the store failed. The user may retry; a generic message is shown.
- Missing references are display fallbacks ("N/A"), never errors.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from capstone_portal.core.logger import get_logger
from capstone_portal.services.admission_policy import DenialReason

logger = get_logger("errors")

STORE_UNAVAILABLE_MESSAGE = "Storage temporarily unavailable. Try again later."


class AdmissionDenied(Exception):
    """Raised when the admission policy rejects a requested action."""

    def __init__(self, reason: DenialReason):
        self.reason = reason
        super().__init__(reason.message)


class ProfileRejected(Exception):
    """Raised when a profile submission conflicts with stored state."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


_STATUS_BY_REASON = {
    DenialReason.not_found: status.HTTP_404_NOT_FOUND,
    DenialReason.not_owner: status.HTTP_403_FORBIDDEN,
    DenialReason.not_a_student: status.HTTP_403_FORBIDDEN,
}


def denial_status(reason: DenialReason) -> int:
    return _STATUS_BY_REASON.get(reason, status.HTTP_409_CONFLICT)


async def admission_denied_handler(request: Request, exc: AdmissionDenied) -> JSONResponse:
    return JSONResponse(
        status_code=denial_status(exc.reason),
        content={"detail": exc.reason.message, "code": exc.reason.value},
    )


async def profile_rejected_handler(request: Request, exc: ProfileRejected) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def store_failure_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error("Store operation failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": STORE_UNAVAILABLE_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AdmissionDenied, admission_denied_handler)
    app.add_exception_handler(ProfileRejected, profile_rejected_handler)
    app.add_exception_handler(PyMongoError, store_failure_handler)
