"""
Profile Resolution

This package turns a domain into a reconciled identity profile. Each stage is a plain
async function so the stages can be exercised on their own; the pipeline module
sequences them and owns supersession of in-flight runs.

Key Components:
- pointer.py: `_adp.<domain>` TXT lookup (DNS-over-HTTPS or system resolver) and CID extraction
- fetch.py: Single GET of a document with a size ceiling
- graph.py: Turtle parsing, with a JSON-LD path for WebID documents
- extract.py: Profile extraction for the ADP document and the WebID document
- secondary.py: Non-fatal resolution of the WebID document
- reconcile.py: Field-by-field merge with conflict detection
- pipeline.py: The stateless run and the superseding orchestrator
- notify.py: One-shot access request to a discovered inbox
- render.py: Single-field and payment-address views
- __main__.py: CLI interface for resolution

Errors from the primary stages are raised as `ResolutionException` and end the run.
Errors from the WebID stage are reported next to the primary profile instead.
"""
