import asyncio
import contextlib
import logging
from time import time
from typing import Optional
from aio_statsd import TelegrafStatsdClient
from aiohttp import web
import aiohttp
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from social.graze.lodestone.app.config import (
    HealthGaugeAppKey,
    MetricsClientAppKey,
    ResolverContextAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
    TickHealthTaskAppKey,
)
from social.graze.lodestone.app.cors import cors_middleware
from social.graze.lodestone.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_ready,
)
from social.graze.lodestone.app.handlers.resolve import handle_resolve
from social.graze.lodestone.app.metrics import MetricsClient, create_metrics_client
from social.graze.lodestone.app.tasks import tick_health_task
from social.graze.lodestone.model.cache import CacheStore
from social.graze.lodestone.model.health import HealthGauge
from social.graze.lodestone.resolve.pipeline import ResolverContext

logger = logging.getLogger(__name__)


def build_resolver_context(
    settings: Settings,
    session: aiohttp.ClientSession,
    metrics_client: MetricsClient,
    health_gauge: Optional[HealthGauge] = None,
) -> ResolverContext:
    """Create the resolver context and its two cache stores from settings."""
    return ResolverContext(
        session=session,
        did_cache=CacheStore(
            "did", settings.did_cache_size, metrics_client=metrics_client
        ),
        xrpc_cache=CacheStore(
            "xrpc", settings.xrpc_cache_size, metrics_client=metrics_client
        ),
        plc_hostname=settings.plc_hostname,
        metrics_client=metrics_client,
        health_gauge=health_gauge,
        did_cache_ttl=settings.did_cache_ttl,
        describe_repo_ttl=settings.describe_repo_ttl,
        get_record_ttl=settings.get_record_ttl,
    )


async def background_tasks(app):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

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
        timeout=aiohttp.ClientTimeout(total=settings.request_timeout),
        trace_configs=[trace_config],
    )

    if settings.metrics_backend == "telegraf":
        statsd_client = TelegrafStatsdClient(
            host=settings.statsd_host, port=settings.statsd_port, debug=settings.debug
        )
        await statsd_client.connect()
        metrics_client = create_metrics_client(
            "telegraf", telegraf_client=statsd_client, debug=settings.debug
        )
    else:
        metrics_client = create_metrics_client(
            settings.metrics_backend, debug=settings.debug
        )
    app[MetricsClientAppKey] = metrics_client

    app[ResolverContextAppKey] = build_resolver_context(
        settings, app[SessionAppKey], metrics_client, app[HealthGaugeAppKey]
    )

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
        response = await handler(request)
        return response
    except web.HTTPException:
        raise
    except Exception as e:
        sentry_sdk.capture_exception(e)
        await request.app[HealthGaugeAppKey].record_error()
        raise e


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    request_path = request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except Exception as e:
        metrics_client.increment(
            "lodestone.server.request.exception",
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
            "lodestone.server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "lodestone.server.request.count",
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
            send_default_pii=False,
            integrations=[AioHttpIntegration()],
        )
    app = web.Application(
        middlewares=[cors_middleware, statsd_middleware, sentry_middleware]
    )

    app[SettingsAppKey] = settings
    app[HealthGaugeAppKey] = HealthGauge()

    app.add_routes([web.get("/resolve", handle_resolve)])

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app.cleanup_ctx.append(background_tasks)

    return app
