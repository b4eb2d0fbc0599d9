"""Services Layer — async orchestration of core rules inside units of work.

Invariants:
    - Every public operation opens exactly one unit of work
    - Services never decide scheduling rules; they load state, call core/, write results

Design Decisions:
    - Engines take their collaborators (transaction manager, gateways) in __init__,
      so hosts and tests wire in-memory or SQL stores the same way
"""
