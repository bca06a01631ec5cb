import logging
from aiohttp import web

from webcivics.webcard.app.config import (
    HealthGaugeAppKey,
    MetricsClientAppKey,
    ResolverOptionsAppKey,
    SessionAppKey,
    SettingsAppKey,
)
from webcivics.webcard.model.outcome import OutcomeStatus, ResolutionOutcome
from webcivics.webcard.resolve.errors import ErrorKind
from webcivics.webcard.resolve.extract import is_known_field_prefix
from webcivics.webcard.resolve.notify import send_access_request
from webcivics.webcard.resolve.pipeline import resolve_profile
from webcivics.webcard.resolve.render import (
    FORMAT_TURTLE,
    output_format,
    render_field,
    render_payment_address,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.InvalidDomain: 400,
    ErrorKind.RecordMissing: 404,
    ErrorKind.PointerNotFound: 404,
    ErrorKind.PointerUnrecognized: 422,
    ErrorKind.GraphParseError: 422,
    ErrorKind.DnsFailure: 502,
    ErrorKind.FetchFailure: 502,
}


def error_response(status: int, message: str, kind: str = "") -> web.Response:
    body = {"error": message}
    if kind:
        body["kind"] = kind
    return web.json_response(body, status=status)


def failed_response(outcome: ResolutionOutcome) -> web.Response:
    kind = outcome.error_kind
    return error_response(
        ERROR_STATUS.get(kind, 500) if kind is not None else 500,
        outcome.message or "Resolution failed",
        kind.value if kind is not None else "",
    )


async def _resolve(request: web.Request, requested_field=None) -> ResolutionOutcome:
    return await resolve_profile(
        request.app[SessionAppKey],
        request.match_info["domain"],
        request.app[ResolverOptionsAppKey],
        requested_field=requested_field,
        metrics=request.app[MetricsClientAppKey],
        health=request.app[HealthGaugeAppKey],
    )


async def handle_profile(request: web.Request):
    """
    Resolve a domain and return its profile.

    Query parameters:
        field: Return only this `prefix:property` field
        format: Output format of the field view, json (default) or turtle
        ecash: Return only the payment address
    """
    field = request.query.get("field")
    if field is not None and not is_known_field_prefix(field):
        return error_response(400, f"Unknown field: {field}")

    outcome = await _resolve(request, requested_field=field)
    if outcome.status != OutcomeStatus.found or outcome.profile is None:
        return failed_response(outcome)

    if field is not None:
        fmt = output_format(request.query.get("format"))
        return web.Response(
            text=render_field(field, outcome.profile.requested_field, fmt),
            content_type="text/turtle" if fmt == FORMAT_TURTLE else "application/json",
        )

    if "ecash" in request.query:
        return web.Response(
            text=render_payment_address(outcome.profile),
            content_type="application/json",
        )

    return web.json_response(outcome.model_dump(mode="json"))


async def handle_access_request(request: web.Request):
    """
    Resolve a domain and send an access request to its WebID inbox.
    """
    outcome = await _resolve(request)
    if outcome.status != OutcomeStatus.found:
        return failed_response(outcome)

    secondary = outcome.secondary
    if secondary is None or secondary.inbox is None:
        return error_response(404, "No inbox available for this WebID.")

    settings = request.app[SettingsAppKey]
    logger.info("Requesting access to %s via %s", secondary.endpoint, secondary.inbox)
    result = await send_access_request(
        request.app[SessionAppKey],
        secondary.inbox,
        target=secondary.endpoint,
        agent=settings.access_request_agent,
    )
    return web.json_response(result.model_dump(), status=200 if result.success else 502)
