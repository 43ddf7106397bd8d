"""Translate domain errors into HTTP responses at the router edge."""

from fastapi import HTTPException, status

from marketplace.errors import (
    ConflictError,
    ForbiddenError,
    MarketplaceError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)

_STATUS_CODES: dict[type[MarketplaceError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(exc: MarketplaceError) -> HTTPException:
    """Map a domain error to an ``HTTPException``.

    Conflicts carry the offending dates so clients can highlight every one.
    """
    status_code = _STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ConflictError):
        return HTTPException(
            status_code=status_code,
            detail={
                "message": exc.message,
                "unavailable_dates": [d.isoformat() for d in exc.unavailable_dates],
            },
        )
    if isinstance(exc, UnauthorizedError):
        return HTTPException(status_code=status_code, detail=exc.message, headers={"WWW-Authenticate": "Bearer"})
    return HTTPException(status_code=status_code, detail=exc.message)
