"""AT-URI resolution pipeline.

Chains URI parsing, handle resolution, DID resolution, PDS endpoint extraction
and the XRPC call for a single URI, and fans a batch of URIs out over
concurrent tasks.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from aiohttp import ClientSession
import sentry_sdk

from social.graze.lodestone.app.metrics import MetricsClient, NoOpMetricsClient
from social.graze.lodestone.atproto.xrpc import (
    DESCRIBE_REPO_TTL,
    GET_RECORD_TTL,
    LIST_RECORDS_TTL,
    describe_repo,
    get_record,
    list_records,
)
from social.graze.lodestone.errors import NoPDSEndpoint, ResolutionError
from social.graze.lodestone.model.cache import CacheStore
from social.graze.lodestone.model.health import HealthGauge
from social.graze.lodestone.resolve.aturi import ResolutionDepth, parse_aturi
from social.graze.lodestone.resolve.did import (
    DEFAULT_PLC_HOSTNAME,
    DID_CACHE_TTL,
    extract_pds_endpoint,
    resolve_did,
)
from social.graze.lodestone.resolve.handle import is_did, resolve_handle

logger = logging.getLogger(__name__)

EMPTY_RESULT = b"{}"
"""Payload emitted in place of any URI that failed to resolve."""


@dataclass
class ResolverContext:
    """
    Everything a resolution task needs, passed explicitly instead of living in globals.

    The two cache stores are shared by every task that uses this context.
    """

    session: ClientSession
    did_cache: CacheStore
    xrpc_cache: CacheStore
    plc_hostname: str = DEFAULT_PLC_HOSTNAME
    metrics_client: MetricsClient = field(default_factory=NoOpMetricsClient)
    health_gauge: Optional[HealthGauge] = None

    did_cache_ttl: float = DID_CACHE_TTL
    describe_repo_ttl: float = DESCRIBE_REPO_TTL
    get_record_ttl: float = GET_RECORD_TTL


async def resolve_at_uri(context: ResolverContext, uri: str) -> bytes:
    """Resolve one AT-URI to the raw JSON body returned by its PDS.

    Args:
        context: Resolver context holding the HTTP session and caches
        uri: AT-URI to resolve

    Returns:
        describeRepo, listRecords or getRecord response body, depending on URI depth

    Raises:
        ResolutionError: At the first stage that fails
    """
    aturi = parse_aturi(uri)

    did = aturi.authority
    if not is_did(did):
        did = await resolve_handle(context.session, aturi.authority)

    document = await resolve_did(
        context.session,
        context.did_cache,
        did,
        plc_hostname=context.plc_hostname,
        ttl=context.did_cache_ttl,
    )

    pds = extract_pds_endpoint(document)
    if pds is None:
        raise NoPDSEndpoint(f"error-resolve-1300 no PDS endpoint found for {did}")

    depth = aturi.depth
    if depth == ResolutionDepth.repository:
        return await describe_repo(
            context.session,
            context.xrpc_cache,
            pds,
            did,
            ttl=context.describe_repo_ttl,
        )
    if depth == ResolutionDepth.collection:
        return await list_records(
            context.session,
            context.xrpc_cache,
            pds,
            did,
            aturi.collection,
            ttl=LIST_RECORDS_TTL,
        )
    if depth == ResolutionDepth.record:
        return await get_record(
            context.session,
            context.xrpc_cache,
            pds,
            did,
            aturi.collection,
            aturi.record_key,
            ttl=context.get_record_ttl,
        )
    raise ResolutionError(f"error-resolve-1500 unhandled resolution depth {depth}")


async def resolve_or_empty(context: ResolverContext, uri: str) -> bytes:
    """Resolve one AT-URI, returning the empty-object sentinel on any failure."""
    try:
        result = await resolve_at_uri(context, uri)
    except ResolutionError as e:
        logger.info("Failed to resolve %s: %s", uri, e)
        context.metrics_client.increment(
            "lodestone.resolve.count", 1, tag_dict={"status": "error", "error": e.kind}
        )
        return EMPTY_RESULT
    except Exception as e:
        logger.exception("Unexpected error resolving %s", uri)
        sentry_sdk.capture_exception(e)
        if context.health_gauge is not None:
            await context.health_gauge.record_error()
        context.metrics_client.increment(
            "lodestone.resolve.count",
            1,
            tag_dict={"status": "error", "error": type(e).__name__},
        )
        return EMPTY_RESULT

    context.metrics_client.increment(
        "lodestone.resolve.count", 1, tag_dict={"status": "ok"}
    )
    return result


async def resolve_batch(context: ResolverContext, uris: Sequence[str]) -> List[bytes]:
    """Resolve every URI concurrently and return the payloads in input order.

    One task is started per URI and all of them are awaited before anything is
    returned. Each task writes only its own slot of the result list, and a
    failed URI's slot holds EMPTY_RESULT.

    Args:
        context: Resolver context holding the HTTP session and caches
        uris: AT-URIs to resolve

    Returns:
        One JSON payload per input URI, in the same order
    """
    results: List[bytes] = [EMPTY_RESULT] * len(uris)
    context.metrics_client.gauge("lodestone.resolve.batch_size", len(uris))

    async def worker(index: int, uri: str) -> None:
        results[index] = await resolve_or_empty(context, uri)

    async with asyncio.TaskGroup() as tg:
        for index, uri in enumerate(uris):
            tg.create_task(worker(index, uri))

    return results
