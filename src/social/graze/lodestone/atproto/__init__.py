"""
AT Protocol Integration

This package handles communication with Personal Data Server (PDS) instances.

Key Components:
- xrpc.py: Read-only XRPC queries (describeRepo, listRecords, getRecord) with
  per-call response caching

All requests are unauthenticated GETs; the response body is passed through
without schema validation.
"""
