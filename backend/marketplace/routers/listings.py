"""
Listing catalog and creation API endpoints.

Handlers that call Supabase are plain ``def``: the supabase client is
synchronous, so FastAPI runs them in its threadpool.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from supabase import Client

from marketplace.db import get_storage_bucket, get_supabase_client
from marketplace.errors import DraftValidationError, GatewayError, ImageUploadError, ListingNotFoundError
from marketplace.models.listing import (
    ALL_CATEGORIES,
    ALL_CATEGORIES_LABEL,
    CATEGORY_LABELS,
    CatalogResponse,
    CategoryOption,
    Listing,
    ListingCard,
    ListingDraft,
)
from marketplace.services.catalog import CatalogView, ListingCache, fetch_listing
from marketplace.services.formatting import (
    format_condition,
    format_listed_date,
    format_price,
    format_relative_age,
)
from marketplace.services.listing_creation import ImageFile, create_listing

router = APIRouter()

logger = logging.getLogger(__name__)


def get_listing_cache(request: Request, client: Client = Depends(get_supabase_client)) -> ListingCache:
    """Process-wide listing cache, created on first use and kept on app.state."""
    cache = getattr(request.app.state, "listing_cache", None)
    if cache is None:
        cache = ListingCache(client)
        request.app.state.listing_cache = cache
    return cache


def _to_card(listing: Listing, detail: bool = False) -> ListingCard:
    return ListingCard(
        listing=listing,
        price_display=format_price(listing.price),
        listed_display=(
            format_listed_date(listing.created_at)
            if detail
            else format_relative_age(listing.created_at)
        ),
        condition_display=format_condition(listing.condition.value) if listing.condition else None,
        category_display=listing.category.label,
    )


@router.get("", response_model=CatalogResponse)
def list_listings(
    category: str = Query(ALL_CATEGORIES),
    q: str = Query(""),
    cache: ListingCache = Depends(get_listing_cache),
):
    """
    Catalog view: every cached listing, newest first, filtered by category
    and a case-insensitive title/description search.

    A failed initial fetch is reported in ``error`` with an empty item list
    rather than as an HTTP error.
    """
    view = CatalogView(cache)
    try:
        view.set_category(category)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

    view.set_search_text(q)

    return CatalogResponse(
        category=view.category,
        search=view.search_text,
        heading=view.heading,
        count=view.count,
        items=[_to_card(listing) for listing in view.listings],
        error=view.error,
    )


@router.get("/categories", response_model=List[CategoryOption])
async def list_categories():
    """Category filter options, "all" first."""
    options = [CategoryOption(id=ALL_CATEGORIES, name=ALL_CATEGORIES_LABEL)]
    options.extend(
        CategoryOption(id=category.value, name=label)
        for category, label in CATEGORY_LABELS.items()
    )
    return options


@router.get("/{listing_id}", response_model=ListingCard)
def get_listing(
    listing_id: str,
    client: Client = Depends(get_supabase_client),
):
    """Listing detail. 404 if the id does not exist."""
    try:
        listing = fetch_listing(client, listing_id)
    except ListingNotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return _to_card(listing, detail=True)


@router.post("", response_model=Listing, status_code=201)
def create_listing_endpoint(
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    category: str = Form(""),
    condition: str = Form(""),
    location: str = Form(""),
    seller_email: str = Form(""),
    image: Optional[UploadFile] = File(None),
    client: Client = Depends(get_supabase_client),
    cache: ListingCache = Depends(get_listing_cache),
):
    """
    Create a listing from a multipart form with a required ``image`` file.

    The image is uploaded first; the listing row is inserted only if the
    upload succeeded. On success the catalog cache is refreshed so the new
    listing appears at the top.
    """
    draft = ListingDraft(
        title=title,
        description=description,
        price=price,
        category=category,
        condition=condition,
        location=location,
        seller_email=seller_email,
    )

    image_file = None
    if image is not None:
        content = image.file.read()
        if content:
            image_file = ImageFile(
                content=content,
                filename=image.filename,
                content_type=image.content_type,
            )

    try:
        listing = create_listing(client, draft, image_file, get_storage_bucket())
    except DraftValidationError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except ImageUploadError as e:
        raise HTTPException(status_code=502, detail=f"Image upload failed: {str(e)}")
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))

    try:
        cache.refresh()
    except GatewayError as e:
        logger.warning(f"Catalog refresh after creating listing {listing.id} failed: {e}")

    return listing
