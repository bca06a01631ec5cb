"""
Metrics Abstraction Layer

Resolution stages and the HTTP server report through `MetricsClient`, so the backend
can be switched by configuration without touching the call sites.

Key Components:
- MetricsClient: Abstract interface for counters, gauges and timers
- TelegrafCompatibilityClient: Delegates to an aio_statsd TelegrafStatsdClient
- NoOpMetricsClient: Discards everything, used when metrics are disabled and in tests
- create_metrics_client: Factory selecting a backend by name

Metric names used by the service:
- webcard.resolve.time (timer, tagged status)
- webcard.resolve.outcome (counter, tagged status and kind)
- webcard.resolve.secondary (counter, tagged success)
- webcard.server.request.time / .count / .exception
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from aio_statsd import TelegrafStatsdClient

logger = logging.getLogger(__name__)

BACKEND_TELEGRAF = "telegraf"
BACKEND_NONE = "none"


class MetricsClient(ABC):
    """
    Backend-agnostic metrics client.

    Tags are passed as a plain dictionary, the way StatsD/Telegraf clients take them.
    """

    @abstractmethod
    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Increment a counter."""

    @abstractmethod
    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Set a gauge to a point-in-time value."""

    @abstractmethod
    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a duration, in seconds."""

    async def connect(self) -> None:
        """Open any connection the backend needs."""

    @abstractmethod
    async def close(self) -> None:
        """Flush pending metrics and close connections."""


class TelegrafCompatibilityClient(MetricsClient):
    """MetricsClient over an existing TelegrafStatsdClient."""

    def __init__(self, telegraf_client: TelegrafStatsdClient):
        self.client = telegraf_client

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.increment(name, value, tag_dict=tag_dict or {})

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.gauge(name, value, tag_dict=tag_dict or {})

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.timer(name, value, tag_dict=tag_dict or {})

    async def connect(self) -> None:
        await self.client.connect()

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Telegraf client: {e}")


class NoOpMetricsClient(MetricsClient):
    """Metrics client that records nothing."""

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    async def close(self) -> None:
        pass


def create_metrics_client(
    backend: str,
    host: str = "localhost",
    port: int = 8125,
    telegraf_client: Optional[TelegrafStatsdClient] = None,
    debug: bool = False,
) -> MetricsClient:
    """
    Create the metrics client for a backend name.

    Args:
        backend: 'telegraf' or 'none'
        host: Telegraf/StatsD host
        port: Telegraf/StatsD port
        telegraf_client: Pre-configured TelegrafStatsdClient to wrap
        debug: Enable client debug logging

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = backend.lower()

    if backend == BACKEND_TELEGRAF:
        if telegraf_client is None:
            telegraf_client = TelegrafStatsdClient(host=host, port=port, debug=debug)
        return TelegrafCompatibilityClient(telegraf_client)

    if backend == BACKEND_NONE:
        logger.info("Metrics collection disabled (no-op client)")
        return NoOpMetricsClient()

    raise ValueError(
        f"Invalid metrics backend: {backend}. "
        f"Supported backends: '{BACKEND_TELEGRAF}', '{BACKEND_NONE}'"
    )
