"""Infrastructure Layer — stores, external gateways, and cross-cutting concerns.

Invariants:
    - Infrastructure never contains scheduling rules; those live in core/
    - External failures propagate to the caller's unit of work (no retries here)

Design Decisions:
    - Two interchangeable stores (memory_store, sql_store) behind the same Protocols
"""
