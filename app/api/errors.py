from fastapi import HTTPException, status

from app.core.exceptions import (
    CommissionError,
    InvalidPeriodError,
    InvalidTransitionError,
    NotFoundError,
    InputValidationError,
    PersistenceError,
)

# Checked in order; subclasses before their bases
ERROR_STATUS_CODES = (
    (InputValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidPeriodError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(exc: CommissionError) -> HTTPException:
    """Translate a domain error into the HTTP error returned to the client."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break

    detail = {"error": exc.code, "message": exc.message}
    field = getattr(exc, "field", None)
    if field:
        detail["field"] = field
    return HTTPException(status_code=status_code, detail=detail)
