"""DID document resolution and PDS endpoint extraction.

Supports the did:plc and did:web methods. Raw DID documents are cached by DID
string so repeated lookups for the same account skip the network.
"""

import asyncio
import logging
from enum import IntEnum
from typing import List, Optional

from aiohttp import ClientError, ClientSession
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from social.graze.lodestone.errors import DidResolutionError, UnsupportedDidMethod
from social.graze.lodestone.model.cache import CacheStore

logger = logging.getLogger(__name__)

DID_CACHE_TTL = 12 * 60 * 60
DEFAULT_PLC_HOSTNAME = "plc.directory"

PDS_SERVICE_TYPE = "AtprotoPersonalDataServer"
PDS_SERVICE_ID_SUFFIX = "#atproto_pds"


class DidMethod(IntEnum):
    """Supported DID methods."""

    plc = 1
    web = 2


DID_METHOD_PREFIXES = {
    DidMethod.plc: "did:plc:",
    DidMethod.web: "did:web:",
}


class DidService(BaseModel):
    """Service entry from a DID document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    type: str = ""
    service_endpoint: str = Field(default="", alias="serviceEndpoint")


class DidDocument(BaseModel):
    """The parts of a DID document needed to locate a PDS."""

    id: str = ""
    service: List[DidService] = []


def did_method(did: str) -> DidMethod:
    """Classify a DID by its method prefix.

    Raises:
        UnsupportedDidMethod: If the DID is neither did:plc nor did:web
    """
    for method, prefix in DID_METHOD_PREFIXES.items():
        if did.startswith(prefix):
            return method
    raise UnsupportedDidMethod(f"error-resolve-1200 unsupported DID method: {did}")


def did_document_url(did: str, plc_hostname: str = DEFAULT_PLC_HOSTNAME) -> str:
    """Build the URL the DID document is fetched from.

    did:plc documents come from the PLC directory, did:web documents from the
    domain's .well-known/did.json.
    """
    method = did_method(did)
    if method == DidMethod.plc:
        return f"https://{plc_hostname}/{did}"
    if method == DidMethod.web:
        domain = did.removeprefix(DID_METHOD_PREFIXES[DidMethod.web])
        return f"https://{domain}/.well-known/did.json"
    raise UnsupportedDidMethod(f"error-resolve-1200 unsupported DID method: {did}")


async def fetch_did_document(session: ClientSession, url: str) -> bytes:
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise DidResolutionError(
                    f"error-resolve-1201 DID resolution failed with status {resp.status}"
                )
            return await resp.read()
    except (ClientError, asyncio.TimeoutError) as e:
        raise DidResolutionError(
            f"error-resolve-1202 DID resolution request to {url} failed: {e}"
        ) from e


async def resolve_did(
    session: ClientSession,
    did_cache: CacheStore,
    did: str,
    plc_hostname: str = DEFAULT_PLC_HOSTNAME,
    ttl: float = DID_CACHE_TTL,
) -> DidDocument:
    """Resolve a DID to its DID document.

    A live cache entry short-circuits the network call. On a miss the document
    is fetched with the method-specific strategy, and the raw body is stored
    keyed by the DID once it decodes.

    Args:
        session: HTTP client session
        did_cache: Cache store for raw DID documents
        did: DID to resolve
        plc_hostname: PLC directory hostname for did:plc resolution
        ttl: Seconds a fetched document stays cached

    Returns:
        Parsed DidDocument

    Raises:
        UnsupportedDidMethod: If the DID method is not plc or web
        DidResolutionError: On any network error, non-200 status or undecodable body
    """
    cached, found = await did_cache.get(did)
    if found and cached is not None:
        try:
            return DidDocument.model_validate_json(cached)
        except ValidationError:
            logger.warning("Discarding undecodable cached DID document for %s", did)

    url = did_document_url(did, plc_hostname)
    raw = await fetch_did_document(session, url)

    try:
        document = DidDocument.model_validate_json(raw)
    except ValidationError as e:
        raise DidResolutionError(
            f"error-resolve-1203 DID document for {did} could not be decoded"
        ) from e

    await did_cache.put(did, raw, ttl)
    return document


def pds_predicate(service: DidService) -> bool:
    """Check if a service entry is the account's PDS.

    Args:
        service: Service entry from a DID document

    Returns:
        True if the type is AtprotoPersonalDataServer or the id ends with #atproto_pds
    """
    return service.type == PDS_SERVICE_TYPE or service.id.endswith(
        PDS_SERVICE_ID_SUFFIX
    )


def extract_pds_endpoint(document: DidDocument) -> Optional[str]:
    """Return the endpoint of the first PDS service entry, or None if there is none."""
    service = next(filter(pds_predicate, document.service), None)
    if service is None or len(service.service_endpoint) == 0:
        return None
    return service.service_endpoint
