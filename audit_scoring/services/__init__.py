"""
services/ - session coordination, ingest and snapshot persistence

Modules:
    ingest.py          - JSON audit payload -> AuditRecord / AuditTemplate
    session.py         - AuditSession: mutation API, cascade, read API
    snapshot_store.py  - File, Redis and in-memory snapshot stores
    redis_cache.py     - Pydantic-aware Redis wrapper and singleton
"""
