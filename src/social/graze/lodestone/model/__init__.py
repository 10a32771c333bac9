"""
In-Memory Models

This package holds the process-local state shared between resolution tasks.

Key Components:
- cache.py: Bounded LRU cache store with per-entry expiry, used for DID
  documents and XRPC responses
- health.py: Health gauge backing the readiness probe

Nothing here is persisted; restarting the process clears every cache.
"""
