"""
Configuration Module for the WebCard Service

Settings are loaded from environment variables with Pydantic, and shared resources are
handed to request handlers through typed aiohttp AppKeys.

Key configuration areas include:
- Service networking and CORS
- DNS lookup method and resolver endpoint
- IPFS gateway and document size ceiling
- Service descriptor table location
- Access request agent identity
- Error reporting and metrics
"""

import asyncio
from typing import Final, List, Optional
import logging
from aiohttp import ClientSession, web
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from webcivics.webcard.app.metrics import MetricsClient
from webcivics.webcard.model.health import UpstreamHealth
from webcivics.webcard.model.services import ServiceTable
from webcivics.webcard.resolve.fetch import DEFAULT_MAX_DOCUMENT_BYTES
from webcivics.webcard.resolve.pointer import (
    DEFAULT_DOH_ENDPOINT,
    DEFAULT_IPFS_GATEWAY,
    DNS_METHOD_DOH,
    DNS_METHOD_NATIVE,
)
from webcivics.webcard.resolve.pipeline import ResolverOptions

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings for the WebCard service.

    Every field maps to the upper-cased environment variable of the same name unless
    an alias says otherwise.
    """

    debug: bool = False
    """
    Enable debug logging and outgoing request tracing.
    Set with DEBUG=true environment variable.
    """

    http_port: int = Field(alias="port", default=5100)
    """
    HTTP port for the service to listen on.
    Set with PORT environment variable.
    """

    allowed_origins: str = "*"
    """
    Comma-separated list of origins allowed for CORS, or * for any origin.
    Set with ALLOWED_ORIGINS environment variable.
    """

    dns_method: str = DNS_METHOD_DOH
    """
    How TXT records are looked up: "doh" (DNS-over-HTTPS JSON) or "native" (system resolver).
    Set with DNS_METHOD environment variable.
    """

    doh_endpoint: str = DEFAULT_DOH_ENDPOINT
    """
    DNS-over-HTTPS JSON endpoint.
    Set with DOH_ENDPOINT environment variable.
    """

    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    """
    IPFS gateway used to fetch ADP documents as <gateway>/ipfs/<cid>.
    Set with IPFS_GATEWAY environment variable.
    """

    max_document_bytes: int = DEFAULT_MAX_DOCUMENT_BYTES
    """
    Largest document body accepted from the gateway or a WebID host. 0 disables the limit.
    Set with MAX_DOCUMENT_BYTES environment variable.
    """

    request_timeout: float = 15.0
    """
    Total timeout in seconds for each outgoing HTTP request.
    Set with REQUEST_TIMEOUT environment variable.
    """

    services_file: Optional[str] = None
    """
    Path to a JSON service descriptor table. The built-in table is used if unset.
    Set with SERVICES_FILE environment variable.
    """

    access_request_agent: str = "https://example.com/webcard-user#me"
    """
    WebID named as the requesting agent in access requests.
    Set with ACCESS_REQUEST_AGENT environment variable.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: str = "none"
    """
    Metrics backend: "telegraf" or "none".
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    @field_validator("dns_method", mode="before")
    @classmethod
    def validate_dns_method(cls, v) -> str:
        """Accept only the two known lookup methods, case-insensitively."""
        if isinstance(v, str) and v.lower() in (DNS_METHOD_DOH, DNS_METHOD_NATIVE):
            return v.lower()
        raise ValueError(
            f"dns_method must be '{DNS_METHOD_DOH}' or '{DNS_METHOD_NATIVE}'"
        )

    def origins(self) -> List[str]:
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def resolver_options(self, services: ServiceTable) -> ResolverOptions:
        return ResolverOptions(
            dns_method=self.dns_method,
            doh_endpoint=self.doh_endpoint,
            ipfs_gateway=self.ipfs_gateway,
            max_document_bytes=self.max_document_bytes or None,
            services=tuple(services),
        )


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

ResolverOptionsAppKey: Final = web.AppKey("resolver_options", ResolverOptions)
"""AppKey for the resolver options built from settings and the service table"""

HealthGaugeAppKey: Final = web.AppKey("health_gauge", UpstreamHealth)
"""AppKey for accessing the upstream health gauge"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for accessing the metrics client"""

TickHealthTaskAppKey: Final = web.AppKey("tick_health_task", asyncio.Task[None])
"""AppKey for the background task that decays the health gauge"""
