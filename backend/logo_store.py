"""Submitter logo lookup in Supabase storage.

Each submitter's logo lives at ``<identity>.png`` in the logo bucket. The
public URL comes from the Supabase client; the bytes are downloaded with
httpx.
"""

import logging

import httpx
from supabase import Client, create_client

from config import LOGO_BUCKET, LOGO_FETCH_TIMEOUT, SUPABASE_SERVICE_KEY, SUPABASE_URL
from errors import LogoFetchError, LogoNotFoundError, MissingInputError

logger = logging.getLogger(__name__)

_client: Client | None = None


def get_supabase() -> Client:
    """Process-wide Supabase client, created on first use.

    Raises:
        LogoFetchError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is missing.
    """
    global _client
    if _client is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
            raise LogoFetchError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be configured")
        _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
        logger.info("Initialized Supabase client for bucket %s", LOGO_BUCKET)
    return _client


def public_logo_url(identity: str, client: Client | None = None) -> str:
    """Public URL of the logo registered for ``identity``."""
    if not identity or not identity.strip():
        raise MissingInputError("Submitter identity is required")

    client = client or get_supabase()
    return client.storage.from_(LOGO_BUCKET).get_public_url(f"{identity.strip()}.png")


async def fetch_logo(
    identity: str,
    http_client: httpx.AsyncClient | None = None,
    supabase_client: Client | None = None,
) -> bytes:
    """Download the submitter's logo bytes.

    Args:
        identity: Submitter identity (e-mail address) used as the object key.
        http_client: Optional client to reuse; a short-lived one is created otherwise.
        supabase_client: Optional Supabase client; the shared one is used otherwise.

    Returns:
        Raw PNG bytes, fully downloaded.

    Raises:
        MissingInputError: If ``identity`` is blank.
        LogoNotFoundError: If no logo is stored for the submitter.
        LogoFetchError: If storage is unreachable or returns an error.
    """
    url = public_logo_url(identity, client=supabase_client)

    try:
        if http_client is None:
            async with httpx.AsyncClient(timeout=LOGO_FETCH_TIMEOUT) as own_client:
                response = await own_client.get(url)
        else:
            response = await http_client.get(url)
    except httpx.HTTPError as e:
        logger.error("Logo fetch failed for %s: %s", identity, e)
        raise LogoFetchError(f"Logo storage unreachable: {e}") from e

    if response.status_code in (400, 404):
        # Supabase answers 400 for missing objects in public buckets
        raise LogoNotFoundError(f"No logo registered for {identity}")
    if response.is_error:
        logger.error("Logo storage returned %d for %s", response.status_code, identity)
        raise LogoFetchError(f"Logo storage returned HTTP {response.status_code}")

    if not response.content:
        raise LogoNotFoundError(f"Logo for {identity} is empty")

    logger.info("Fetched logo for %s (%d bytes)", identity, len(response.content))
    return response.content
