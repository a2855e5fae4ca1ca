"""
Supabase Storage service for listing images.
Handles upload under a fresh key and public URL resolution.
"""

import logging
import os
import re
import time
from urllib.parse import urlparse, urlunparse
from uuid import uuid4

from supabase import Client

from marketplace.errors import ImageUploadError

logger = logging.getLogger(__name__)

LISTING_IMAGE_PREFIX = "listings"
IMAGE_CACHE_CONTROL_SECONDS = 3600
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


def build_image_key(filename: str | None = None) -> str:
    """
    Generate a unique storage key for a listing image.

    Key format: listings/{epoch_millis}-{random_hex}.{ext}
    The extension is taken from the original filename (sanitized); files
    without one fall back to "jpg".
    """
    ext = "jpg"
    if filename and "." in filename:
        candidate = re.sub(r"[^\w]", "", filename.rsplit(".", 1)[1]).lower()
        if candidate:
            ext = candidate

    millis = int(time.time() * 1000)
    return f"{LISTING_IMAGE_PREFIX}/{millis}-{uuid4().hex[:8]}.{ext}"


def upload_listing_image(
    client: Client,
    bucket: str,
    file_content: bytes,
    filename: str | None = None,
    content_type: str | None = None,
) -> str:
    """
    Upload a listing image to Supabase Storage.

    Using upsert=true so a key collision overwrites rather than fails, and a
    one hour cache-control hint for the public CDN.

    Args:
        client: Supabase client
        bucket: Storage bucket name
        file_content: Binary content of the image
        filename: Original filename, used for the key's extension
        content_type: MIME type reported by the uploader

    Returns:
        Storage key (e.g., "listings/1767225600000-1a2b3c4d.png")

    Raises:
        ImageUploadError: If upload fails
    """
    storage_key = build_image_key(filename)

    try:
        client.storage.from_(bucket).upload(
            storage_key,
            file_content,
            {
                "content-type": content_type or DEFAULT_IMAGE_CONTENT_TYPE,
                "cache-control": str(IMAGE_CACHE_CONTROL_SECONDS),
                "upsert": "true",
            }
        )
    except Exception as e:
        logger.error(f"Image upload to bucket {bucket!r} failed: {e}")
        raise ImageUploadError(f"Failed to upload image to storage: {str(e)}")

    logger.info(f"Uploaded listing image to {bucket}/{storage_key}")
    return storage_key


def get_public_url(client: Client, bucket: str, storage_key: str) -> str:
    """
    Resolve the public URL of an uploaded object.

    Raises:
        ImageUploadError: If the URL cannot be resolved
    """
    try:
        public_url = client.storage.from_(bucket).get_public_url(storage_key)
    except Exception as e:
        raise ImageUploadError(f"Could not get public URL after upload: {str(e)}")

    # Older clients return {"publicURL": ...} instead of a plain string
    if isinstance(public_url, dict):
        public_url = public_url.get("publicURL") or public_url.get("publicUrl")

    if not public_url or not isinstance(public_url, str):
        raise ImageUploadError("Could not get public URL after upload")

    return _rewrite_public_url_host(public_url.rstrip("?"))


def _rewrite_public_url_host(public_url: str) -> str:
    """
    Replace the host in an object URL with the browser-accessible Supabase URL.

    When the backend runs inside Docker it reaches Supabase through an
    internal host such as ``http://host.docker.internal:54321``, and that host
    ends up in every public URL the client builds. If ``SUPABASE_PUBLIC_URL``
    is set its scheme and host are swapped in; otherwise the URL is returned
    unchanged.
    """
    public_origin = os.getenv("SUPABASE_PUBLIC_URL", "").strip()
    if not public_origin:
        return public_url

    parsed_url = urlparse(public_url)
    parsed_origin = urlparse(public_origin)

    return urlunparse((
        parsed_origin.scheme,
        parsed_origin.netloc,
        parsed_url.path,
        parsed_url.params,
        parsed_url.query,
        parsed_url.fragment,
    ))


def check_bucket(client: Client, bucket: str) -> bool:
    """Return True if the bucket exists in the project."""
    buckets = client.storage.list_buckets()
    return bucket in [b.name for b in buckets]


