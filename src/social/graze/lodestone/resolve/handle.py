"""AT Protocol handle resolution.

Resolves a handle to its DID with the HTTPS well-known endpoint. There is no DNS
TXT fallback and no retry, and results are not cached.
"""

import asyncio
import logging

from aiohttp import ClientError, ClientSession

from social.graze.lodestone.errors import HandleResolutionError

logger = logging.getLogger(__name__)

DID_PREFIX = "did:"


def is_did(authority: str) -> bool:
    """Check if an AT-URI authority is already a DID rather than a handle.

    Args:
        authority: Authority component of an AT-URI

    Returns:
        True if the authority starts with the did: prefix
    """
    return authority.startswith(DID_PREFIX)


def handle_well_known_url(handle: str) -> str:
    return f"https://{handle}/.well-known/atproto-did"


async def resolve_handle(session: ClientSession, handle: str) -> str:
    """Resolve AT Protocol handle to DID using the HTTPS well-known endpoint.

    Fetches the DID from https://{handle}/.well-known/atproto-did. The response
    must be a 200 whose trimmed body is a DID.

    Args:
        session: HTTP client session
        handle: AT Protocol handle to resolve

    Returns:
        DID string

    Raises:
        HandleResolutionError: On any network error, non-200 status or malformed body
    """
    url = handle_well_known_url(handle)
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise HandleResolutionError(
                    f"error-resolve-1100 handle lookup for {handle} returned status {resp.status}"
                )
            body = await resp.text()
    except (ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
        raise HandleResolutionError(
            f"error-resolve-1101 handle lookup for {handle} failed: {e}"
        ) from e

    did = (body or "").strip()
    if not is_did(did):
        raise HandleResolutionError(
            f"error-resolve-1102 handle lookup for {handle} returned a malformed DID"
        )

    logger.debug("Resolved handle %s to %s", handle, did)
    return did
