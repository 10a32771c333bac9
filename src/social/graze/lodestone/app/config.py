"""
Configuration Module for Lodestone

This module defines the configuration system for the Lodestone resolver service,
using Pydantic for settings validation and dependency injection through AppKeys.

The Settings class is loaded from environment variables with defaults that match
the production cache policy. Application components reach settings and shared
resources through typed AppKeys.

Key configuration areas include:
- Service networking
- Upstream lookups (PLC directory, request deadline)
- Cache capacities and per-call TTLs
- Monitoring and error reporting
"""

import asyncio
from typing import Final, Literal, Optional
import logging
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from aiohttp import web
from aiohttp import ClientSession

from social.graze.lodestone.app.metrics import MetricsClient
from social.graze.lodestone.model.health import HealthGauge
from social.graze.lodestone.resolve.pipeline import ResolverContext


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings for the Lodestone service.

    Environment variables map onto fields by name (case-insensitive), so
    ``DID_CACHE_SIZE=1024`` sets ``did_cache_size``. TTLs are in seconds and a
    TTL of zero disables caching for that call type. listRecords responses are
    never cached and have no setting.
    """

    debug: bool = False
    """
    Enable debug mode: logs every outbound request.
    Set with DEBUG=true environment variable.
    """

    http_port: int = Field(alias="port", default=8080)
    """
    HTTP port for the service to listen on.
    Set with PORT environment variable.
    """

    plc_hostname: str = "plc.directory"
    """
    Hostname for the PLC directory service for DID resolution.
    Set with PLC_HOSTNAME environment variable.
    """

    request_timeout: float = 10.0
    """
    Total deadline in seconds for each outbound HTTP request.
    Set with REQUEST_TIMEOUT environment variable.
    """

    did_cache_size: int = 4096
    """Maximum number of DID documents kept in memory."""

    xrpc_cache_size: int = 8192
    """Maximum number of XRPC responses kept in memory."""

    did_cache_ttl: int = 12 * 60 * 60
    """Seconds a DID document stays cached. Default: 43200 (12 hours)"""

    describe_repo_ttl: int = 30 * 60
    """Seconds a describeRepo response stays cached. Default: 1800 (30 minutes)"""

    get_record_ttl: int = 2 * 60
    """Seconds a getRecord response stays cached. Default: 120 (2 minutes)"""

    # Monitoring and error reporting
    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: Literal["telegraf", "none"] = "none"
    """
    Metrics backend to use.
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

    @field_validator("did_cache_size", "xrpc_cache_size")
    @classmethod
    def validate_cache_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache sizes must be at least 1")
        return v

    @field_validator("did_cache_ttl", "describe_repo_ttl", "get_record_ttl")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache TTLs cannot be negative")
        return v


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

ResolverContextAppKey: Final = web.AppKey("resolver_context", ResolverContext)
"""AppKey for accessing the resolver context (caches, session, cache policy)"""

HealthGaugeAppKey: Final = web.AppKey("health_gauge", HealthGauge)
"""AppKey for accessing the health monitoring gauge"""

TickHealthTaskAppKey: Final = web.AppKey("tick_health_task", asyncio.Task[None])
"""AppKey for the background task that decays the health gauge"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for the metrics client"""
