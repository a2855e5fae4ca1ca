"""
Database client configuration.
Uses Supabase for PostgreSQL tables + Storage.

The client is built lazily so a missing configuration surfaces on first use
rather than at import time. Callers receive it through ``get_supabase_client``
(FastAPI dependency) and pass it explicitly into the services.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv
from supabase import create_client, Client

from marketplace.errors import ConfigurationError

load_dotenv()

DEFAULT_STORAGE_BUCKET = "images"


def get_storage_bucket() -> str:
    """Object-store bucket for listing images (``SUPABASE_STORAGE_BUCKET``, default ``images``)."""
    return os.getenv("SUPABASE_STORAGE_BUCKET", "").strip() or DEFAULT_STORAGE_BUCKET


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Create the Supabase client from SUPABASE_URL / SUPABASE_KEY.

    Raises:
        ConfigurationError: If either variable is missing or empty
    """
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")

    if not supabase_url or not supabase_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

    return create_client(supabase_url, supabase_key)
