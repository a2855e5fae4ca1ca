"""
Shared fixtures: listing rows and a mocked Supabase client.
"""

import os
from unittest.mock import MagicMock

import pytest

# Mock environment variables before importing app modules
os.environ['SUPABASE_URL'] = 'https://test.supabase.co'
os.environ['SUPABASE_KEY'] = 'test-anon-key'

from marketplace.models.listing import Listing


def _row(**overrides) -> dict:
    row = {
        "id": "listing-1",
        "title": "Mountain Bike",
        "description": "Barely used trail bike",
        "price": 350,
        "category": "sports",
        "condition": "good",
        "location": "Portland, OR",
        "seller_email": "seller@example.com",
        "image_url": "https://test.supabase.co/storage/v1/object/public/images/listings/1.jpg",
        "created_at": "2026-01-05T10:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_row():
    """Factory for listings table rows with sensible defaults."""
    return _row


@pytest.fixture
def make_listing():
    """Factory for Listing models built from make_row defaults."""
    def _make(**overrides) -> Listing:
        return Listing.model_validate(_row(**overrides))
    return _make


@pytest.fixture
def mock_client():
    """Stand-in for the Supabase client."""
    return MagicMock()
