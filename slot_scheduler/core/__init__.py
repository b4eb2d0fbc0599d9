"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (wall-clock time is always a parameter)

Design Decisions:
    - Functional core separated from imperative shell: services read state,
      call core rules, write the results back inside one unit of work
"""
