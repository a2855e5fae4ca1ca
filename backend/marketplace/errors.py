"""
Exceptions raised by the marketplace services.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""

from typing import List, Optional


class MarketplaceError(Exception):
    """Base class for marketplace errors."""


class ConfigurationError(MarketplaceError):
    """Raised when the Supabase connection settings are missing."""


class GatewayError(MarketplaceError):
    """Raised when a Supabase table or storage call fails."""


class ImageUploadError(GatewayError):
    """Raised when a listing image cannot be uploaded or its public URL resolved."""


class ListingNotFoundError(MarketplaceError):
    """Raised when a listing id does not exist."""

    def __init__(self, listing_id: str):
        super().__init__(f"Listing not found: {listing_id}")
        self.listing_id = listing_id


class DraftValidationError(MarketplaceError):
    """Raised when a draft fails client-side validation, before any network call."""

    def __init__(self, problems: List[str], message: Optional[str] = None):
        super().__init__(message or "; ".join(problems))
        self.problems = problems
