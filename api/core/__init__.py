"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that every feature uses (DB wiring,
configuration, logging, error envelopes, upstream clients). Feature-specific
SQL and business logic stay in the feature package (e.g. `companies/`).
"""
