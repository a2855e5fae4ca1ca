"""
Buyer-to-seller messaging.

Messages are write-only: one row per inquiry in the ``messages`` table,
carrying a snapshot of the listing's seller_email.
"""

import logging
from typing import List, Optional

from supabase import Client

from marketplace.errors import DraftValidationError, GatewayError
from marketplace.models.listing import Listing
from marketplace.models.message import Message, MessageDraft

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "messages"


def validate_message_draft(draft: MessageDraft) -> List[str]:
    """Required-field presence only; email format is not checked."""
    return [
        f"{field_name} is required"
        for field_name in ("buyer_name", "buyer_email", "message")
        if not getattr(draft, field_name).strip()
    ]


def send_message(client: Client, listing: Listing, draft: MessageDraft) -> Message:
    """
    Store a buyer inquiry for a listing.

    Raises:
        DraftValidationError: If a required field is empty; nothing is sent
        GatewayError: If the insert fails
    """
    problems = validate_message_draft(draft)
    if problems:
        raise DraftValidationError(problems)

    message = Message(
        listing_id=listing.id,
        buyer_name=draft.buyer_name.strip(),
        buyer_email=draft.buyer_email.strip(),
        message=draft.message.strip(),
        seller_email=listing.seller_email,
    )

    try:
        client.table(MESSAGES_TABLE).insert(message.model_dump()).execute()
    except Exception as e:
        logger.error(f"Error sending message for listing {listing.id}: {e}")
        raise GatewayError(f"Failed to send message: {str(e)}")

    logger.info(f"Stored message for listing {listing.id}")
    return message


class MessageComposer:
    """
    Contact-seller form state for one listing.

    A successful submit clears the draft and closes the form; a failed one
    keeps the draft so the buyer can retry without retyping.
    """

    def __init__(self, listing: Listing):
        self.listing = listing
        self.draft = MessageDraft()
        self.is_open = False
        self.sending = False
        self.error: Optional[str] = None

    def open(self) -> None:
        self.is_open = True
        self.error = None

    def close(self) -> None:
        self.is_open = False

    def update(self, **fields: str) -> None:
        self.draft = self.draft.model_copy(update=fields)

    def submit(self, client: Client) -> Optional[Message]:
        """Send the current draft. Returns the stored Message, or None on failure."""
        self.sending = True
        try:
            message = send_message(client, self.listing, self.draft)
        except (DraftValidationError, GatewayError) as e:
            self.error = str(e)
            return None
        finally:
            self.sending = False

        self.draft = MessageDraft()
        self.error = None
        self.is_open = False
        return message
