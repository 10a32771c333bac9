"""
Identity and URI Resolution

This package turns AT-URIs into the PDS responses they point at.

Key Components:
- aturi.py: AT-URI parsing and resolution depth
- handle.py: Handle resolution via .well-known/atproto-did
- did.py: DID document resolution (did:plc, did:web) and PDS endpoint extraction
- pipeline.py: Per-URI resolution chain and concurrent batch resolution
- __main__.py: CLI interface for resolution

Resolution Types:
1. Handle Resolution
   - HTTP-based resolution via well-known endpoints (.well-known/atproto-did)
   - Not cached

2. DID Resolution
   - did:plc method resolution via PLC directory
   - did:web method resolution via .well-known/did.json
   - Raw documents cached for 12 hours

3. Record Resolution
   - Bare authority -> com.atproto.repo.describeRepo (cached 30 minutes)
   - Authority + collection -> com.atproto.repo.listRecords (never cached)
   - Authority + collection + record key -> com.atproto.repo.getRecord (cached 2 minutes)
"""
