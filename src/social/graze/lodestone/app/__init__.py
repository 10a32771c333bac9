"""
Lodestone Application Layer

This package implements the HTTP boundary around the resolution pipeline using
the aiohttp framework.

Key Components:
- cli.py: Entry point for running the application
- server.py: Web server configuration, middleware setup and startup/cleanup
- config.py: Configuration management using Pydantic settings
- handlers/: Request handlers for the resolve and internal endpoints
- metrics.py: Metrics client abstraction (Telegraf/StatsD or no-op)
- tasks.py: Background task ticking the health gauge
- cors.py: CORS handling for cross-origin requests

The application uses several middleware layers:
- CORS middleware answering preflights and allowing any origin
- Statsd middleware for metrics collection
- Sentry middleware for error reporting

It provides the following endpoints:
- GET /resolve?uri=...&uris=... (AT-URI resolution)
- GET /internal/alive and /internal/ready (probes)
"""
