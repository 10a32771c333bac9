import asyncio
import logging
from urllib.parse import quote, urlencode
from typing import Dict

from aiohttp import ClientError, ClientSession

from social.graze.lodestone.errors import XRPCError
from social.graze.lodestone.model.cache import CacheStore

logger = logging.getLogger(__name__)

DESCRIBE_REPO_TTL = 30 * 60
LIST_RECORDS_TTL = 0
GET_RECORD_TTL = 2 * 60

DESCRIBE_REPO = "com.atproto.repo.describeRepo"
LIST_RECORDS = "com.atproto.repo.listRecords"
GET_RECORD = "com.atproto.repo.getRecord"


def xrpc_url(pds: str, method: str, params: Dict[str, str]) -> str:
    """Build the canonical request URL for an XRPC query.

    The same string is used as the response cache key, so parameter order is
    fixed by the caller and the PDS trailing slash is always stripped.
    """
    query = urlencode(params, safe=":", quote_via=quote)
    return f"{pds.removesuffix('/')}/xrpc/{method}?{query}"


async def fetch_and_cache(
    session: ClientSession, xrpc_cache: CacheStore, url: str, ttl: float
) -> bytes:
    """GET an XRPC URL, going through the response cache.

    A TTL of zero skips the cache entirely. The body is returned and cached as-is
    whatever the status code, so PDS error bodies such as RecordNotFound reach
    the caller. Only a failed request raises.
    """
    if ttl > 0:
        cached, found = await xrpc_cache.get(url)
        if found and cached is not None:
            return cached

    logger.debug("XRPC GET %s", url)
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                logger.debug("XRPC GET %s returned status %d", url, resp.status)
            data = await resp.read()
    except (ClientError, asyncio.TimeoutError) as e:
        raise XRPCError(f"error-resolve-1401 XRPC call {url} failed: {e}") from e

    await xrpc_cache.put(url, data, ttl)
    return data


async def describe_repo(
    session: ClientSession,
    xrpc_cache: CacheStore,
    pds: str,
    did: str,
    ttl: float = DESCRIBE_REPO_TTL,
) -> bytes:
    url = xrpc_url(pds, DESCRIBE_REPO, {"repo": did})
    return await fetch_and_cache(session, xrpc_cache, url, ttl)


async def list_records(
    session: ClientSession,
    xrpc_cache: CacheStore,
    pds: str,
    did: str,
    collection: str,
    ttl: float = LIST_RECORDS_TTL,
) -> bytes:
    url = xrpc_url(pds, LIST_RECORDS, {"repo": did, "collection": collection})
    return await fetch_and_cache(session, xrpc_cache, url, ttl)


async def get_record(
    session: ClientSession,
    xrpc_cache: CacheStore,
    pds: str,
    did: str,
    collection: str,
    rkey: str,
    ttl: float = GET_RECORD_TTL,
) -> bytes:
    url = xrpc_url(
        pds, GET_RECORD, {"repo": did, "collection": collection, "rkey": rkey}
    )
    return await fetch_and_cache(session, xrpc_cache, url, ttl)
