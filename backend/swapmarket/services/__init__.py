"""Services Layer — swap lifecycle engine, review gate, messaging, and the service facade.

Invariants:
    - Services own transaction boundaries; core/ owns the rules
    - Services depend on core protocols, SqlSwapStore is wired in only by SwapService

Design Decisions:
    - One file per component for locality
"""
