"""API Layer — thin FastAPI shell over the swap consistency core.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Routes delegate to SwapService; no business rules in this package
"""
