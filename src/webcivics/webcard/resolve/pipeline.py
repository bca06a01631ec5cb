"""Resolution pipeline.

`resolve_profile` performs one complete, stateless run:

1. Validate the domain and resolve its ADP pointer from DNS
2. Fetch the signed document from the IPFS gateway
3. Parse it and extract the profile
4. If the profile names a WebID, resolve it (failures are reported, not raised)
5. Merge both profiles

Any failure in steps 1-3 ends the run with a failed outcome; the WebID is never
fetched after a primary failure.

`ProfileOrchestrator` holds the "current domain" and "current outcome" for a caller
that issues requests over time. A new request supersedes the run in flight: the old
task is cancelled, and if its result arrives anyway it is discarded because its tag
no longer matches the current request.
"""

import asyncio
import contextlib
import logging
from time import time
from typing import Optional, Tuple

import sentry_sdk
from aiohttp import ClientSession
from pydantic import BaseModel

from webcivics.webcard.app.metrics import MetricsClient, NoOpMetricsClient
from webcivics.webcard.model.health import UpstreamHealth
from webcivics.webcard.model.outcome import ResolutionOutcome
from webcivics.webcard.model.profile import Profile
from webcivics.webcard.model.services import DEFAULT_SERVICES, ServiceDescriptor
from webcivics.webcard.resolve.errors import ErrorKind, ResolutionException
from webcivics.webcard.resolve.extract import extract_profile
from webcivics.webcard.resolve.fetch import DEFAULT_MAX_DOCUMENT_BYTES, fetch_document
from webcivics.webcard.resolve.graph import load_graph
from webcivics.webcard.resolve.pointer import (
    DEFAULT_DOH_ENDPOINT,
    DEFAULT_IPFS_GATEWAY,
    DNS_METHOD_DOH,
    parse_domain,
    resolve_pointer,
)
from webcivics.webcard.resolve.reconcile import merge_profiles
from webcivics.webcard.resolve.secondary import resolve_secondary

logger = logging.getLogger(__name__)

UPSTREAM_FAILURES = frozenset([ErrorKind.DnsFailure, ErrorKind.FetchFailure])


class ResolverOptions(BaseModel):
    """Knobs for a resolution run. Defaults match the public ADP deployment."""

    model_config = {"frozen": True}

    dns_method: str = DNS_METHOD_DOH
    doh_endpoint: str = DEFAULT_DOH_ENDPOINT
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    max_document_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES
    services: Tuple[ServiceDescriptor, ...] = tuple(DEFAULT_SERVICES)


async def resolve_primary(
    session: ClientSession,
    domain: str,
    options: ResolverOptions,
    requested_field: Optional[str] = None,
) -> Profile:
    """Resolve the ADP profile of a validated domain.

    Raises:
        ResolutionException: From whichever stage failed
    """
    pointer = await resolve_pointer(
        session,
        domain,
        dns_method=options.dns_method,
        doh_endpoint=options.doh_endpoint,
        gateway=options.ipfs_gateway,
    )
    logger.debug("Resolved %s to CID %s", domain, pointer.cid)

    document = await fetch_document(
        session, pointer.resolved_uri, max_bytes=options.max_document_bytes
    )
    graph = load_graph(document)
    logger.debug("Parsed %d triples from %s", len(graph), pointer.resolved_uri)

    return extract_profile(
        graph,
        options.services,
        raw_document=document.body,
        requested_field=requested_field,
    )


def _record_outcome(
    metrics: MetricsClient, outcome: ResolutionOutcome, started: float
) -> None:
    status = outcome.status.value
    metrics.timer("webcard.resolve.time", time() - started, tag_dict={"status": status})
    metrics.increment(
        "webcard.resolve.outcome",
        1,
        tag_dict={
            "status": status,
            "kind": outcome.error_kind.value if outcome.error_kind else "none",
        },
    )


async def resolve_profile(
    session: ClientSession,
    domain: str,
    options: Optional[ResolverOptions] = None,
    requested_field: Optional[str] = None,
    metrics: Optional[MetricsClient] = None,
    health: Optional[UpstreamHealth] = None,
) -> ResolutionOutcome:
    """Run the whole pipeline for one domain.

    Args:
        session: HTTP client session
        domain: Domain as entered by the user
        options: Resolver options, defaults if None
        requested_field: Optional `prefix:property` to extract as a single value
        metrics: Metrics client for run timing and outcome counts
        health: Upstream health gauge to report DNS and fetch failures to

    Returns:
        A found or failed ResolutionOutcome; taxonomy errors are never raised
    """
    options = options or ResolverOptions()
    metrics = metrics or NoOpMetricsClient()
    started = time()

    try:
        domain = parse_domain(domain)
        profile = await resolve_primary(session, domain, options, requested_field)
    except ResolutionException as e:
        logger.warning("Resolution of %s failed: %s", domain, e.message)
        if health is not None and e.kind in UPSTREAM_FAILURES:
            await health.record_failure()
        outcome = ResolutionOutcome.failed(domain, e)
        _record_outcome(metrics, outcome, started)
        return outcome

    secondary = None
    secondary_error = None
    if profile.secondary_endpoint is not None:
        result = await resolve_secondary(
            session,
            profile.secondary_endpoint,
            options.services,
            max_bytes=options.max_document_bytes,
        )
        secondary = result.profile
        secondary_error = result.error
        metrics.increment(
            "webcard.resolve.secondary",
            1,
            tag_dict={"success": secondary is not None},
        )

    outcome = ResolutionOutcome.found(
        domain,
        profile,
        merge_profiles(profile, secondary, options.services),
        secondary=secondary,
        secondary_error=secondary_error,
    )
    _record_outcome(metrics, outcome, started)
    return outcome


class ProfileOrchestrator:
    """
    Owns the current request and its outcome for a long-lived caller.

    States move from idle to loading on `request`, and from loading to found or failed
    when the run completes. `reset` returns to idle and clears everything held. Only
    the orchestrator writes `outcome`; callers read it as an immutable snapshot.

    Every run is tagged with a run number and the domain it was started for. A run
    whose tag is no longer current when it completes is discarded.

    Args:
        session: HTTP client session shared by all runs
        options: Resolver options for every run
        metrics: Optional metrics client
        health: Optional upstream health gauge
        cancel_superseded: Cancel a superseded run instead of only ignoring its result
    """

    def __init__(
        self,
        session: ClientSession,
        options: Optional[ResolverOptions] = None,
        metrics: Optional[MetricsClient] = None,
        health: Optional[UpstreamHealth] = None,
        cancel_superseded: bool = True,
    ) -> None:
        self._session = session
        self._options = options or ResolverOptions()
        self._metrics = metrics
        self._health = health
        self._cancel_superseded = cancel_superseded

        self._run_id = 0
        self._current_domain: Optional[str] = None
        self._task: Optional[asyncio.Task[ResolutionOutcome]] = None
        self._outcome = ResolutionOutcome.idle()

    @property
    def current_domain(self) -> Optional[str]:
        return self._current_domain

    @property
    def outcome(self) -> ResolutionOutcome:
        return self._outcome

    def request(
        self, domain: str, requested_field: Optional[str] = None
    ) -> "asyncio.Task[ResolutionOutcome]":
        """Start resolving `domain`, superseding any run in flight."""
        self._supersede()
        self._current_domain = domain
        self._outcome = ResolutionOutcome.loading(domain)
        self._task = asyncio.create_task(
            self._run(self._run_id, domain, requested_field)
        )
        return self._task

    def reset(self) -> None:
        """Abandon any run in flight and return to idle."""
        self._supersede()
        self._current_domain = None
        self._outcome = ResolutionOutcome.idle()
        self._task = None

    async def wait(self) -> ResolutionOutcome:
        """Wait for the current run, if any, and return the current outcome."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        return self._outcome

    def _supersede(self) -> None:
        self._run_id += 1
        if (
            self._cancel_superseded
            and self._task is not None
            and not self._task.done()
        ):
            logger.info("Cancelling resolution of %s", self._current_domain)
            self._task.cancel()

    async def _run(
        self, run_id: int, domain: str, requested_field: Optional[str]
    ) -> ResolutionOutcome:
        try:
            outcome = await resolve_profile(
                self._session,
                domain,
                self._options,
                requested_field=requested_field,
                metrics=self._metrics,
                health=self._health,
            )
        except Exception as e:
            sentry_sdk.capture_exception(e)
            logger.exception("Unexpected error resolving %s", domain)
            outcome = ResolutionOutcome.unexpected(domain, f"Unexpected error: {e}")
        if run_id != self._run_id or domain != self._current_domain:
            logger.info("Discarding superseded resolution of %s", domain)
            return outcome
        self._outcome = outcome
        return outcome
