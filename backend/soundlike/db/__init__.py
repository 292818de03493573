"""Database Layer — SQLAlchemy declarative base shared by all ORM models.

Invariants:
    - Single async engine per process, owned by infrastructure.database.DatabaseSessionManager
    - All sessions are async (AsyncSession)
"""
