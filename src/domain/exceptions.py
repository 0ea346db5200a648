"""
Domain exceptions for the classification and tax estimation engine.

Raised where the condition is detected and propagated unchanged to the
caller. Validation of raw transaction payloads is left to pydantic, whose
ValidationError is surfaced as-is.
"""

from typing import Iterable, Optional


class TaxEngineError(Exception):
    """Base class for engine errors."""
    pass


class UnsupportedJurisdictionError(TaxEngineError):
    """Raised when a profile names a country the engine cannot compute."""

    def __init__(self, jurisdiction: Optional[str], supported: Iterable[str] = ()):
        self.jurisdiction = jurisdiction
        self.supported = tuple(supported)
        message = f"Unsupported tax jurisdiction: {jurisdiction!r}"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class ProfileNotFoundError(TaxEngineError):
    """Raised when no tax profile exists for a user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No tax profile found for user {user_id}")


class InvalidTaxPeriodError(TaxEngineError, ValueError):
    """Raised for a malformed year/quarter combination."""
    pass


class TaxConfigurationError(TaxEngineError):
    """Raised when jurisdiction parameters or the category taxonomy are malformed."""
    pass
