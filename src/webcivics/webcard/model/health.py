import asyncio


class UpstreamHealth:
    """
    Tracks how often the upstream services (DNS resolver, IPFS gateway) fail.

    Every failed DNS query or document fetch bumps a counter, and a background task
    decays it once per tick. While a burst of failures keeps the counter above the
    threshold, `is_healthy` returns false so readiness probes can take the instance
    out of rotation. Failures caused by the resolved domain itself (missing record,
    bad pointer, unparsable document) are not upstream failures and are not counted.
    """

    def __init__(self, failures: int = 0, threshold: int = 50) -> None:
        self._failures = failures
        self._threshold = threshold
        self._lock = asyncio.Lock()

    async def record_failure(self, count: int = 1) -> int:
        async with self._lock:
            self._failures += int(count)
            return self._failures

    async def tick(self) -> None:
        async with self._lock:
            if self._failures > 0:
                self._failures -= 1

    async def is_healthy(self) -> bool:
        async with self._lock:
            return self._failures <= self._threshold
