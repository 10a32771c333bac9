"""
Shared test configuration and fixtures for Lodestone tests.

Provides a fake aiohttp ClientSession that serves canned responses and records
every requested URL, a controllable clock for cache expiry, and helpers for
building DID documents.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest

from social.graze.lodestone.model.cache import CacheStore
from social.graze.lodestone.resolve.pipeline import ResolverContext

Route = Union[Tuple[int, Union[bytes, str]], BaseException]


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse used as an async context manager."""

    def __init__(self, status: int, body: bytes, delay: float = 0) -> None:
        self.status = status
        self._body = body
        self._delay = delay

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8")

    async def __aenter__(self) -> "FakeResponse":
        if self._delay:
            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class FakeClientSession:
    """
    Serves canned responses keyed by exact URL.

    Unknown URLs answer 404. A route set to an exception instance raises it when
    the request is made.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.delays: Dict[str, float] = {}
        self.requests: List[str] = []

    def add(self, url: str, status: int, body: Union[bytes, str]) -> None:
        self.routes[url] = (status, body)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, b"not found")
        if isinstance(route, BaseException):
            raise route
        status, body = route
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FakeResponse(status, body, self.delays.get(url, 0))

    def count(self, url: str) -> int:
        return self.requests.count(url)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def did_document(
    did: str,
    pds: Optional[str] = "https://pds.example",
    service_type: str = "AtprotoPersonalDataServer",
    service_id: str = "#atproto_pds",
) -> bytes:
    services = []
    if pds is not None:
        services.append(
            {"id": service_id, "type": service_type, "serviceEndpoint": pds}
        )
    return json.dumps(
        {
            "@context": ["https://www.w3.org/ns/did/v1"],
            "id": did,
            "alsoKnownAs": ["at://alice.example"],
            "verificationMethod": [],
            "service": services,
        }
    ).encode("utf-8")


@pytest.fixture
def fake_session() -> FakeClientSession:
    return FakeClientSession()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_did_document():
    return did_document


@pytest.fixture
def resolver_context(fake_session, fake_clock) -> ResolverContext:
    """Resolver context with fresh caches for each test."""
    return ResolverContext(
        session=fake_session,  # type: ignore[arg-type]
        did_cache=CacheStore("did", 4096, clock=fake_clock),
        xrpc_cache=CacheStore("xrpc", 8192, clock=fake_clock),
    )
