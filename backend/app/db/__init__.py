"""Database Package — SQLAlchemy declarative Base shared by every ORM model.

Invariants:
    - Single async engine per process (infrastructure/database.py, via init_db)
    - Base.metadata is the source for create_all (tests) and alembic autogenerate

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
