"""
Pydantic models for buyer messages.
"""

from pydantic import BaseModel


class MessageDraft(BaseModel):
    """Buyer inquiry as typed into the contact form."""
    buyer_name: str = ""
    buyer_email: str = ""
    message: str = ""


class Message(MessageDraft):
    """
    Row written to the ``messages`` table.

    ``seller_email`` is a snapshot of the listing's seller at submission
    time, not a live reference.
    """
    listing_id: str
    seller_email: str

    class Config:
        frozen = True
