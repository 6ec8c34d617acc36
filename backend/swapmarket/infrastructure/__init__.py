"""Infrastructure Layer — persistence, notification delivery, and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/repository_protocols.py, never the reverse
    - All SQLAlchemy failures surface as StorageError or a mapped domain conflict

Design Decisions:
    - Notification delivery wrapped with retry/backoff, isolated from lifecycle commits
"""
