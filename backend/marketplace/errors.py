"""Domain errors raised by the booking core and translated at the API edge."""

from datetime import date


class MarketplaceError(Exception):
    """Base class for every error the services raise on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Missing or invalid fields, or a stay whose check-out is not after check-in."""


class NotFoundError(MarketplaceError):
    """Unknown property, provider, or booking."""


class ConflictError(MarketplaceError):
    """Requested nights are not available.

    ``unavailable_dates`` lists every offending night in date order so the
    caller can report all of them at once.
    """

    def __init__(self, message: str, unavailable_dates: list[date] | None = None) -> None:
        super().__init__(message)
        self.unavailable_dates = sorted(unavailable_dates or [])


class UnauthorizedError(MarketplaceError):
    """Missing or invalid credential for a mutating operation."""


class ForbiddenError(MarketplaceError):
    """The authenticated provider does not own the property."""


class UpstreamError(MarketplaceError):
    """Payment or email provider failure."""
