"""
WebCard - Agent Discovery Protocol profile resolver

This package resolves a domain name into a decentralized identity profile by chaining
DNS, content-addressed storage, and RDF graph documents. When the primary profile names
a personal linked-data endpoint (a WebID), that second document is resolved as well and
the two attribute sets are reconciled field by field.

Key Components:
- resolve: The resolution pipeline (pointer lookup, fetch, parse, extract, reconcile)
- model: Pydantic models for profiles, outcomes, service tables and health
- app: aiohttp service exposing the pipeline, with configuration and metrics

Resolution Flow:
1. Query the `_adp.<domain>` TXT record and extract the `adp:signer <URI>` pointer
2. Fetch the signed document from an IPFS gateway by its CID
3. Parse the Turtle document into a graph and extract the profile
4. Optionally resolve the WebID document found in the profile
5. Merge both sources into one list of fields with conflict flags

Nothing is cached between runs; every resolution starts from DNS.
"""
