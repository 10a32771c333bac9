import json
import logging
from typing import List, Sequence

from aiohttp import web

from social.graze.lodestone.app.config import ResolverContextAppKey
from social.graze.lodestone.resolve.pipeline import EMPTY_RESULT, resolve_batch

logger = logging.getLogger(__name__)


def encode_results(results: Sequence[bytes]) -> bytes:
    """Join raw JSON payloads into a JSON array.

    Payloads are embedded byte-for-byte. One that does not parse as JSON is
    replaced with an empty object so the array as a whole stays valid.
    """
    parts: List[bytes] = []
    for result in results:
        try:
            json.loads(result)
        except ValueError:
            logger.warning("Replacing non-JSON upstream payload with an empty object")
            result = EMPTY_RESULT
        parts.append(result.strip())
    return b"[" + b",".join(parts) + b"]"


async def handle_resolve(request: web.Request) -> web.Response:
    """Resolve one or more AT-URIs.

    ``uris`` may be repeated and ``uri`` is appended after them. A request made
    with a single ``uri`` gets the bare payload back; everything else gets an
    array in input order.
    """
    uris: List[str] = list(request.query.getall("uris", []))
    singular = request.query.get("uri", "")
    if singular:
        uris.append(singular)

    if len(uris) == 0:
        return web.Response(status=400, text="missing uri or uris parameter")

    results = await resolve_batch(request.app[ResolverContextAppKey], uris)

    if len(uris) == 1 and singular:
        return web.Response(body=results[0], content_type="application/json")

    return web.Response(body=encode_results(results), content_type="application/json")
