"""
Lodestone - AT Protocol URI Resolver

This module implements a small read-only service that turns AT Protocol URIs
(``at://<authority>/<collection>/<record-key>``) into the JSON the owning
Personal Data Server (PDS) returns for them.

Key Components:
- app: Web application layer, configuration, metrics and CLI entry points
- atproto: XRPC calls made against a user's PDS
- model: In-memory data structures (cache store, health gauge)
- resolve: AT-URI parsing, handle and DID resolution, and the batch pipeline

Resolution Flow:
1. Parse the AT-URI into authority, collection and record key
2. Resolve a handle authority to a DID via the HTTPS well-known endpoint
3. Resolve the DID to its DID document (cached)
4. Pick the PDS endpoint out of the document's service list
5. Call describeRepo, listRecords or getRecord depending on the URI depth (cached per call type)

Every URI in a batch is resolved concurrently and a failure at any stage only
affects that URI's slot, which is filled with an empty JSON object.
"""
