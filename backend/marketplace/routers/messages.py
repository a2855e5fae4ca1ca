"""
Contact-seller API endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from marketplace.db import get_supabase_client
from marketplace.errors import DraftValidationError, GatewayError, ListingNotFoundError
from marketplace.models.message import Message, MessageDraft
from marketplace.services.catalog import fetch_listing
from marketplace.services.messaging import send_message, validate_message_draft

router = APIRouter()


@router.post("/{listing_id}/messages", response_model=Message, status_code=201)
def send_message_endpoint(
    listing_id: str,
    draft: MessageDraft,
    client: Client = Depends(get_supabase_client),
):
    """
    Send a buyer inquiry to the seller of a listing.

    Required fields are checked before the listing is loaded, so an
    incomplete draft never reaches the database. The seller address is taken
    from the listing, not from the request.
    """
    problems = validate_message_draft(draft)
    if problems:
        raise HTTPException(status_code=422, detail=problems)

    try:
        listing = fetch_listing(client, listing_id)
        return send_message(client, listing, draft)
    except DraftValidationError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except ListingNotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))
