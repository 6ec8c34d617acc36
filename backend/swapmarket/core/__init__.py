"""Core Layer — pure swap rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic (event ids and timestamps aside)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
