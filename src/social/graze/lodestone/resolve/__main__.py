from typing import List
import argparse
import aiohttp
import asyncio
import logging

from social.graze.lodestone.model.cache import CacheStore
from social.graze.lodestone.resolve.did import DEFAULT_PLC_HOSTNAME
from social.graze.lodestone.resolve.pipeline import ResolverContext, resolve_batch

logger = logging.getLogger(__name__)


async def realMain() -> None:
    parser = argparse.ArgumentParser(prog="resolve", description="Resolve AT-URIs")
    parser.add_argument("uri", nargs="+", help="The AT-URI(s) to resolve.")
    parser.add_argument(
        "--plc-hostname",
        default=DEFAULT_PLC_HOSTNAME,
        help="The PLC hostname to use for resolving did-method-plc DIDs.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Total timeout in seconds for each outbound request.",
    )

    args = vars(parser.parse_args())

    uris: List[str] = args.get("uri", [])

    timeout = aiohttp.ClientTimeout(total=args.get("timeout"))
    async with aiohttp.ClientSession(timeout=timeout) as session:
        context = ResolverContext(
            session=session,
            did_cache=CacheStore("did", 4096),
            xrpc_cache=CacheStore("xrpc", 8192),
            plc_hostname=args.get("plc_hostname"),
        )
        results = await resolve_batch(context, uris)

    for uri, result in zip(uris, results):
        logger.debug("resolved %s", uri)
        print(result.decode("utf-8", errors="replace"))


def main() -> None:
    logging.basicConfig()
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
