"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (caller input)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
