"""
Listing catalog: fetch, cache, filter, and view state.

Public API:
  filter_listings(listings, category, search_text) -> list[Listing]
  ListingCache(client).refresh()                   -> tuple[Listing, ...]
  CatalogView(cache, category, search_text)        -> derived view over the cache
  fetch_listing(client, listing_id)                -> Listing
"""

import logging
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError
from supabase import Client

from marketplace.errors import GatewayError, ListingNotFoundError
from marketplace.models.listing import ALL_CATEGORIES, Category, Listing, category_heading

logger = logging.getLogger(__name__)

LISTINGS_TABLE = "listings"


def normalize_category(category: Optional[str]) -> str:
    """
    Validate a catalog filter value.

    Returns "all" for empty input, otherwise the enumerated category value.

    Raises:
        ValueError: If the value is neither "all" nor a known category
    """
    if not category or category == ALL_CATEGORIES:
        return ALL_CATEGORIES
    return Category(category).value


def filter_listings(
    listings: Iterable[Listing],
    category: str = ALL_CATEGORIES,
    search_text: str = "",
) -> List[Listing]:
    """
    Derive the displayed subset of a listing collection.

    1. Unless category is "all", keep listings in that category.
    2. If the trimmed search text is non-empty, keep listings whose title or
       description contains it, case-insensitively.

    Relative order of the input is preserved. Pure and idempotent.
    """
    filtered = list(listings)

    if category != ALL_CATEGORIES:
        filtered = [listing for listing in filtered if listing.category == category]

    if search_text.strip():
        needle = search_text.lower()
        filtered = [
            listing for listing in filtered
            if needle in listing.title.lower() or needle in listing.description.lower()
        ]

    return filtered


def _parse_row(row: dict) -> Listing:
    try:
        return Listing.model_validate(row)
    except ValidationError as e:
        raise GatewayError(f"Malformed listing row: {str(e)}")


def _parse_rows(rows: list) -> List[Listing]:
    """Parse table rows, skipping (and logging) any that fail validation."""
    listings: List[Listing] = []
    for row in rows:
        try:
            listings.append(_parse_row(row))
        except GatewayError as e:
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning(f"Skipping listing {row_id!r}: {e}")
    return listings


class ListingCache:
    """
    In-memory holder of the most recently fetched listing collection.

    Refreshed wholesale; a failed refresh leaves the previous contents in place.
    """

    def __init__(self, client: Client):
        self.client = client
        self.listings: Tuple[Listing, ...] = ()
        self.loaded = False
        self.last_error: Optional[str] = None

    def refresh(self) -> Tuple[Listing, ...]:
        """
        Fetch every listing, newest first, and replace the cache contents.

        Raises:
            GatewayError: If the query fails. Rows that fail validation are
                skipped, not fatal
        """
        try:
            result = (
                self.client.table(LISTINGS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            self.last_error = f"Failed to fetch listings: {str(e)}"
            logger.error(self.last_error)
            raise GatewayError(self.last_error)

        listings = tuple(_parse_rows(result.data or []))

        self.listings = listings
        self.loaded = True
        self.last_error = None
        logger.info(f"Listing cache refreshed with {len(listings)} listings")
        return self.listings


class CatalogView:
    """
    Catalog view state: loading flag, active filters, and the visible listings.

    The visible list is always filter_listings(cache, category, search_text);
    every setter re-derives it synchronously. Constructing a view over a cache
    that has never loaded triggers the one initial fetch.
    """

    def __init__(self, cache: ListingCache, category: str = ALL_CATEGORIES, search_text: str = ""):
        self.cache = cache
        self.category = normalize_category(category)
        self.search_text = search_text
        self.loading = False
        self.error: Optional[str] = None
        self.listings: List[Listing] = []

        if not cache.loaded:
            self.loading = True
            self.refresh()
            self.loading = False
        else:
            self._rederive()

    def refresh(self) -> None:
        """Re-fetch the cache. Failures set ``error`` and keep the current view."""
        try:
            self.cache.refresh()
        except GatewayError as e:
            self.error = str(e)
            return
        self.error = None
        self._rederive()

    def set_category(self, category: str) -> None:
        self.category = normalize_category(category)
        self._rederive()

    def set_search_text(self, search_text: str) -> None:
        self.search_text = search_text
        self._rederive()

    @property
    def heading(self) -> str:
        return category_heading(self.category)

    @property
    def count(self) -> int:
        return len(self.listings)

    def _rederive(self) -> None:
        self.listings = filter_listings(self.cache.listings, self.category, self.search_text)


def fetch_listing(client: Client, listing_id: str) -> Listing:
    """
    Load a single listing by id.

    Raises:
        ListingNotFoundError: If no row has this id
        GatewayError: If the query fails
    """
    try:
        result = (
            client.table(LISTINGS_TABLE)
            .select("*")
            .eq("id", listing_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching listing {listing_id}: {e}")
        raise GatewayError(f"Failed to fetch listing: {str(e)}")

    if not result.data:
        raise ListingNotFoundError(listing_id)

    return _parse_row(result.data[0])
