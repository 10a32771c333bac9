import asyncio


class HealthGauge:
    """
    Readiness score for the resolver process.

    Ordinary upstream failures (a dead handle, a missing DID document, an
    unreachable PDS) are part of normal resolution and never touch the gauge;
    those URIs simply come back as ``{}``. The gauge only counts errors nobody
    expected: an exception escaping a request handler through the sentry
    middleware, or a resolution task failing with something other than a
    ``ResolutionError``.

    ``tick_health_task`` drains one point every tick. Once the score climbs past
    ``health_threshold`` the ``/internal/ready`` probe answers 503 until enough
    ticks have passed.
    """

    def __init__(self, value: int = 0, health_threshold: int = 100) -> None:
        self._score = value
        self._threshold = health_threshold
        self._lock = asyncio.Lock()

    async def record_error(self, weight: int = 1) -> int:
        """Add ``weight`` points for an unexpected error and return the new score."""
        async with self._lock:
            self._score += int(weight)
            return self._score

    async def tick(self) -> None:
        """Drain one point, stopping at zero."""
        async with self._lock:
            self._score = max(self._score - 1, 0)

    async def is_healthy(self) -> bool:
        async with self._lock:
            return self._score <= self._threshold

    @property
    def value(self) -> int:
        return self._score

    @property
    def threshold(self) -> int:
        return self._threshold
