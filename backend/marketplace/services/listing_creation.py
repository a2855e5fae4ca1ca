"""
Listing creation flow.

Validates a draft, uploads its image to Supabase Storage, then inserts the
listing row. The insert is the only commit point: if any earlier step fails,
no listing is created (an uploaded image may be left orphaned).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import ValidationError
from supabase import Client

from marketplace.errors import DraftValidationError, GatewayError
from marketplace.models.listing import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Category,
    Condition,
    Listing,
    ListingDraft,
)
from marketplace.services.catalog import LISTINGS_TABLE
from marketplace.services.storage import get_public_url, upload_listing_image

logger = logging.getLogger(__name__)


@dataclass
class ImageFile:
    """An image attached to a draft listing."""
    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


def parse_price(raw: str) -> Optional[Decimal]:
    """Parse a price string. Returns None unless it is a finite, non-negative number."""
    try:
        price = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def validate_listing_draft(draft: ListingDraft, image: Optional[ImageFile]) -> List[str]:
    """
    Check a draft before anything is sent to the backend.

    Returns a list of human-readable problems; empty when the draft may be
    submitted. An image is required even though image_url is nullable in the
    table.
    """
    problems: List[str] = []

    for field_name in ("title", "description", "location", "seller_email", "category"):
        if not getattr(draft, field_name).strip():
            problems.append(f"{field_name} is required")

    if len(draft.title.strip()) > TITLE_MAX_LENGTH:
        problems.append(f"title must be at most {TITLE_MAX_LENGTH} characters")
    if len(draft.description.strip()) > DESCRIPTION_MAX_LENGTH:
        problems.append(f"description must be at most {DESCRIPTION_MAX_LENGTH} characters")

    if draft.category.strip() and draft.category.strip() not in {c.value for c in Category}:
        problems.append(f"category {draft.category!r} is not a known category")
    if draft.condition.strip() and draft.condition.strip() not in {c.value for c in Condition}:
        problems.append(f"condition {draft.condition!r} is not a known condition")

    if parse_price(draft.price) is None:
        problems.append("price must be a non-negative number")

    if image is None or not image.content:
        problems.append("an image is required")

    return problems


def build_listing_row(draft: ListingDraft, image_url: Optional[str]) -> dict:
    """Insert payload for the listings table."""
    return {
        "title": draft.title.strip(),
        "description": draft.description.strip(),
        "price": str(parse_price(draft.price)),
        "category": draft.category.strip(),
        "condition": draft.condition.strip() or None,
        "location": draft.location.strip(),
        "seller_email": draft.seller_email.strip(),
        "image_url": image_url,
    }


def create_listing(
    client: Client,
    draft: ListingDraft,
    image: Optional[ImageFile],
    bucket: str,
) -> Listing:
    """
    Validate, upload the image, and insert a new listing.

    Args:
        client: Supabase client
        draft: Form input
        image: Attached image (required)
        bucket: Storage bucket for the image

    Returns:
        The created Listing, with id and created_at assigned by the database

    Raises:
        DraftValidationError: If the draft is incomplete; nothing is uploaded
        ImageUploadError: If the upload or public URL step fails; no insert
        GatewayError: If the insert fails
    """
    problems = validate_listing_draft(draft, image)
    if problems:
        raise DraftValidationError(problems)

    image_url = None
    if image is not None:
        storage_key = upload_listing_image(
            client, bucket, image.content, image.filename, image.content_type
        )
        image_url = get_public_url(client, bucket, storage_key)

    row = build_listing_row(draft, image_url)

    try:
        result = client.table(LISTINGS_TABLE).insert(row).execute()
    except Exception as e:
        logger.error(f"Error creating listing: {e}")
        raise GatewayError(f"Failed to create listing: {str(e)}")

    if not result.data:
        raise GatewayError("Failed to create listing: no row returned")

    try:
        listing = Listing.model_validate({**row, **result.data[0]})
    except ValidationError as e:
        logger.error(f"Created listing row could not be read back: {e}")
        raise GatewayError(f"Listing was created but the stored row is malformed: {str(e)}")

    logger.info(f"Created listing {listing.id} in category {listing.category.value}")
    return listing
