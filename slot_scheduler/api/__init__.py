"""API Layer — FastAPI routes, identity extraction, and global error handlers.

Invariants:
    - Routes validate input (pydantic) and authorize roles, then delegate to engines
    - No scheduling rule is implemented in this layer

Design Decisions:
    - Engines are built once in the lifespan and reached through app.state
"""
