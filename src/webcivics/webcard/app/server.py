import asyncio
import contextlib
import logging
from time import time
from typing import (
    Optional,
)
from aiohttp import web
import aiohttp
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from webcivics.webcard.app.config import (
    HealthGaugeAppKey,
    MetricsClientAppKey,
    ResolverOptionsAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
    TickHealthTaskAppKey,
)
from webcivics.webcard.app.cors import cors_middleware
from webcivics.webcard.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_ready,
)
from webcivics.webcard.app.handlers.profile import (
    handle_access_request,
    handle_profile,
)
from webcivics.webcard.app.metrics import create_metrics_client
from webcivics.webcard.app.tasks import tick_health_task
from webcivics.webcard.model.health import UpstreamHealth
from webcivics.webcard.model.services import load_service_table

logger = logging.getLogger(__name__)


async def background_tasks(app):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    services = load_service_table(settings.services_file)
    app[ResolverOptionsAppKey] = settings.resolver_options(services)

    trace_config = aiohttp.TraceConfig()

    if settings.debug:

        async def on_request_start(
            session, trace_config_ctx, params: aiohttp.TraceRequestStartParams
        ):
            logging.info("Starting request: %s", params)

        async def on_request_end(session, trace_config_ctx, params):
            logging.info("Ending request: %s", params)

        trace_config.on_request_start.append(on_request_start)
        trace_config.on_request_end.append(on_request_end)

    app[SessionAppKey] = aiohttp.ClientSession(
        trace_configs=[trace_config],
        timeout=aiohttp.ClientTimeout(total=settings.request_timeout),
    )

    metrics_client = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        debug=settings.debug,
    )
    await metrics_client.connect()
    app[MetricsClientAppKey] = metrics_client

    logger.info("Startup complete")

    app[TickHealthTaskAppKey] = asyncio.create_task(tick_health_task(app))

    yield

    logger.info("Shutting down background tasks")

    app[TickHealthTaskAppKey].cancel()

    with contextlib.suppress(asyncio.exceptions.CancelledError):
        await app[TickHealthTaskAppKey]

    await app[SessionAppKey].close()
    await app[MetricsClientAppKey].close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    # Route pattern rather than path, so each domain is not its own series.
    resource = request.match_info.route.resource
    request_path = resource.canonical if resource is not None else request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except Exception as e:
        metrics_client.increment(
            "webcard.server.request.exception",
            1,
            tag_dict={
                "exception": type(e).__name__,
                "path": request_path,
                "method": request_method,
            },
        )
        raise e
    finally:
        metrics_client.timer(
            "webcard.server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "webcard.server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


async def start_web_server(settings: Optional[Settings] = None):

    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()],
        )
    app = web.Application(
        middlewares=[cors_middleware, statsd_middleware, sentry_middleware]
    )

    app[SettingsAppKey] = settings
    app[HealthGaugeAppKey] = UpstreamHealth()

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app.add_routes(
        [
            web.get("/api/profile/{domain}", handle_profile),
            web.post("/api/profile/{domain}/access-request", handle_access_request),
        ]
    )

    app.cleanup_ctx.append(background_tasks)

    return app
